#!/usr/bin/env python
# coding: utf-8

# ## Chapter 03: Sampling the Imaginary
#
# Once we have samples from a posterior, every question about it becomes a question about counting samples. We work with the globe tossing posterior (6 waters in 9 tosses) from a 1000-point grid, and later with NUTS draws from the `Pyro` program.

# In[1]:


import numpy as np
import plotly.express as px

from rethinking import fit, posterior_predictive, precis
from rethinking.chapter02 import base as globe, globe_binomial
from rethinking.chapter03 import base


# #### Sampling from a grid-approximate posterior

# In[2]:


grid_df, samples = base.posterior_samples(W=6, N=9, grid_size=1000, size=10000, seed=100)
fig = px.histogram(x=samples, nbins=50, title="10,000 samples of p")
fig.show()


# ### 1. Intervals of defined mass
#
# A percentile interval (PI) puts equal mass in each tail. The highest posterior density interval (HPDI) is the narrowest interval holding the same mass. For a posterior as skewed as 3 waters in 3 tosses the two disagree.

# In[3]:


print(base.interval_summary(samples).round(3))

skewed_grid_df, skewed_samples = base.posterior_samples(W=3, N=3, grid_size=1000, size=10000, seed=100)
print(base.interval_summary(skewed_samples, probs=(0.5,)).round(3))


# ### 2. Point estimates
#
# The MAP, the mean and the median answer different questions. A loss function picks between them: absolute loss is minimised by the median.

# In[4]:


print(base.point_estimates(skewed_grid_df, skewed_samples).round(3))
loss = base.expected_loss(skewed_grid_df, loss="absolute")
print("decision minimising expected absolute loss: %.3f" % loss.idxmin())


# ### 3. Sampling to simulate prediction
#
# Dummy data: the model also simulates observations. With $N=2$ and $p=0.7$ the simulated frequencies match the exact binomial probabilities.

# In[5]:


base.dummy_data(N=2, p=0.7, size=100000, seed=3).round(3)


# The posterior predictive distribution averages the binomial predictions over the posterior uncertainty in $p$.

# In[6]:


simulated_w = base.posterior_predictive(samples, N=9, seed=3)
base.predictive_distribution(simulated_w, N=9).round(3)


# The same simulation from NUTS draws, through `Pyro`'s `Predictive`.

# In[7]:


globe_data = globe.load_data()
globe_fit = fit(globe_binomial, globe_data)
print(precis(globe_fit).round(3))

ppc = posterior_predictive(globe_binomial, globe_fit, N=globe_data["N"], W=None)
base.predictive_distribution(ppc["obs"].astype(int), N=9).round(3)

