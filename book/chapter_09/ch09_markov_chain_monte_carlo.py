#!/usr/bin/env python
# coding: utf-8

# ## Chapter 09: Markov Chain Monte Carlo
#
# ### 1. Good King Markov
#
# King Markov rules a ring of 10 islands; island $k$ has population proportional to $k$. Each week he flips a coin to pick a neighbouring island and moves there with probability $\frac{pop_{proposal}}{pop_{current}}$. In the long run the fraction of weeks spent on each island matches its share of the population.

# In[1]:


import pyro
import matplotlib.pyplot as plt

from rethinking import fit, precis
from rethinking.chapter09 import (base, non_identifiable, non_identifiable_regularised, tamed_chain,
                                  wild_chain)
from rethinking.plots import plot_chains, trace_rank_plot

pyro.set_rng_seed(1)
plt.style.use('default')


# In[2]:


positions, visits_df = base.king_markov_visits(num_weeks=100000, seed=9)
base.plot_king_markov(positions, visits_df, show=True)
visits_df.round(3)


# ### 2. Taming a wild chain
#
# Two observations, $-1$ and $1$, and nearly flat priors. The sampler wanders into absurd regions of the parameter space, and the diagnostics say so: tiny `n_eff`, `r_hat` far from 1.

# In[3]:


two_points = base.two_points()
wild_chain.show()
wild_fit, wild_diagnostics = fit(wild_chain, two_points, num_chains=3, diagnostics=True)
base.chain_report(wild_fit, wild_diagnostics, show=True)


# Weakly informative priors are enough to tame it.

# In[4]:


tamed_chain.show()
tamed_fit, tamed_diagnostics = fit(tamed_chain, two_points, num_chains=3, diagnostics=True)
base.chain_report(tamed_fit, tamed_diagnostics, show=True)


# ### 3. Non-identifiable parameters
#
# With $\mu = a_1 + a_2$ only the sum is identified by the data. Flat priors let $a_1$ and $a_2$ drift to huge, perfectly anti-correlated values; regularising priors keep the chains sane without changing the sum.

# In[5]:


gaussian_data = base.simulate_gaussian(num_obs=100, seed=41)
non_identifiable.show()
flat_fit = fit(non_identifiable, gaussian_data, num_chains=3)
print(precis(flat_fit).round(2))
plot_chains(flat_fit, show=True)


# Thinning does not rescue the flat-prior chains: their Gelman-Rubin stays far from 1 even after keeping every 5th draw, so autocorrelation is not the problem.

# In[6]:


base.thinned_grubin(flat_fit, thin=5)


# In[7]:


regularised_fit = fit(non_identifiable_regularised, gaussian_data, num_chains=3)
print(precis(regularised_fit).round(2))
trace_rank_plot(regularised_fit, show=True)

