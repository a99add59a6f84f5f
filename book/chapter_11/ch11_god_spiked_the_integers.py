#!/usr/bin/env python
# coding: utf-8

# ## Chapter 11: God Spiked the Integers
#
# Generalized linear models for counts. First, graduate admissions at UC Berkeley in 1973: is there gender bias in admissions? Then, the tool kits of Oceanic societies: do bigger populations with more contact have more tools?

# In[1]:


import numpy as np
import plotly.express as px

from rethinking import fit, precis, posterior_predictive
from rethinking.chapter11 import (base, kline_intercept, kline_interaction, ucb_gender,
                                  ucb_gender_dept)
from rethinking.plots import plot_observed_vs_simulated
from rethinking.summary import compare, waic


# ### 1. Aggregated binomial: UCB admissions

# In[2]:


ucb_df = base.load_ucbadmit()
ucb_data = base.transform_ucbadmit(ucb_df)
ucb_df


# Total effect of gender: one intercept per gender.

# In[3]:


ucb_gender.show()
gender_data = {key: ucb_data[key] for key in ("gid", "applications", "admit")}
gender_fit = fit(ucb_gender, gender_data)
print(precis(gender_fit).round(2))
base.gender_contrasts(gender_fit).round(3)


# Men appear to be admitted more often. But the posterior predictions miss badly for most departments.

# In[4]:


ppc = posterior_predictive(ucb_gender, gender_fit, gid=gender_data["gid"],
                           applications=gender_data["applications"], admit=None)
rates = ppc["obs"] / ucb_df["applications"].to_numpy()
labels = ["%s_%s" % (dept, gender[0]) for dept, gender in zip(ucb_df["dept"], ucb_df["applicant.gender"])]
plot_observed_vs_simulated(ucb_df["admit"] / ucb_df["applications"], rates, labels=labels,
                           title="Admission rate: observed vs posterior predictive", show=True)


# Departments differ a lot in how selective they are, and women applied more to the selective ones. Conditioning on department:

# In[5]:


print(base.admission_rates(ucb_df).round(3))
ucb_gender_dept.show()
gender_dept_fit = fit(ucb_gender_dept, ucb_data)
print(precis(gender_dept_fit).round(2))
base.gender_contrasts(gender_dept_fit).round(3)


# ### 2. Poisson regression: Oceanic tool kits

# In[6]:


kline_df = base.load_kline()
kline_data = base.transform_kline(kline_df)
kline_df


# In[7]:


kline_intercept.show()
intercept_fit = fit(kline_intercept, {"P": kline_data["P"], "total_tools": kline_data["total_tools"]})
kline_interaction.show()
interaction_fit = fit(kline_interaction, kline_data)
print(precis(interaction_fit).round(2))

compare(intercept=waic(kline_intercept, intercept_fit, P=kline_data["P"], total_tools=kline_data["total_tools"]),
        interaction=waic(kline_interaction, interaction_fit, **kline_data)).round(2)


# Expected number of tools along log population, for low & high contact societies.

# In[8]:


P_seq = np.linspace(-1.4, 3, 50)
expected_df = base.expected_tools(interaction_fit, P_seq)
fig = px.line(expected_df, x="P", y="mean", color="contact", title="Expected tools")
fig.add_scatter(x=kline_data["P"].numpy(), y=kline_df["total_tools"], mode="markers", name="observed")
fig.show()

