#!/usr/bin/env python
# coding: utf-8

# ## Chapter 13: Models with Memory
#
# Varying intercepts: each department gets its own intercept, but the intercepts are themselves drawn from a common distribution whose mean $\bar{a}$ and spread $\sigma$ are learned from the data. Departments inform each other, which pulls extreme estimates towards $\bar{a}$ (shrinkage).

# In[1]:


from rethinking import fit, precis
from rethinking.chapter13 import base, ucb_varying_intercepts
from rethinking.plots import plot_posterior_density, trace_rank_plot


# In[2]:


ucb_df, ucb_data = base.load_data()
ucb_varying_intercepts.show()
varying_fit = fit(ucb_varying_intercepts, ucb_data)
precis(varying_fit).round(2)


# The gender coefficient `bm` is close to zero once departments are accounted for, as in chapter 11, but now the department effects are partially pooled.

# In[3]:


trace_rank_plot(varying_fit, parameters=["a_bar", "sigma", "bm"], show=True)
plot_posterior_density({"bm": varying_fit["bm"], "sigma": varying_fit["sigma"]},
                       title="Posterior of bm & sigma", show=True)


# In[4]:


base.shrinkage(ucb_df, varying_fit).round(3)

