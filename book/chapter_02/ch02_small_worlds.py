#!/usr/bin/env python
# coding: utf-8

# ## Chapter 02: Small Worlds and Large Worlds
#
# ### 1. Introduction
#
# A globe is tossed in the air and caught; we record whether the right index finger lands on water (`W`) or land (`L`). Nine tosses gave `W L W W W L W L W`. What proportion $p$ of the globe is covered in water?
#
# The generative story is a binomial count of waters in $N$ tosses, with a flat prior over $p$:
# <br>
# <br>
# $W \sim Binomial(N, p)$
# <br>
# $p \sim Uniform(0, 1)$
# <br>
# <br>
# All the helper code is glued in the `base` class of [chapter02](../../rethinking/chapter02.py).

# In[1]:


import numpy as np
import pyro
import matplotlib.pyplot as plt

from rethinking import fit, precis
from rethinking.chapter02 import base, globe_binomial

pyro.set_rng_seed(1)
plt.style.use('default')


# #### Data

# In[2]:


globe_data = base.load_data()
print("W: %s, N: %s" % (globe_data["W"].item(), globe_data["N"].item()))


# ### 2. Grid approximation
#
# With a single parameter we can simply evaluate the posterior on a grid of candidate values of $p$: multiply the prior by the likelihood at each point and normalise. The coarser the grid, the rougher the picture. The prior matters too: a step prior that rules out $p<0.5$ and a prior peaked at $0.5$ both reshape the posterior.

# In[3]:


grids = base.grid_posteriors(W=6, N=9, grid_sizes=(5, 20), show=True)
grids[(20, "flat")].round(4)


# ### 3. Quadratic approximation
#
# Near its peak a posterior is often close to Gaussian. Find the mode (MAP), measure the curvature there, and use the Gaussian with that mean and curvature. With a flat prior the exact posterior is $Beta(W+1, L+1)$, so we can check how good the approximation is.

# In[4]:


globe_binomial.show()
base.quap_vs_exact(W=6, N=9).round(3)


# With more data the posterior becomes more Gaussian, and the approximation improves.

# In[5]:


for W, N in [(12, 18), (24, 36)]:
    print("W=%s, N=%s" % (W, N))
    print(base.quap_vs_exact(W=W, N=N).round(3), "\n")


# ### 4. Markov chain Monte Carlo
#
# A Metropolis chain does not need the posterior to be normalised at all. Propose a small step, accept it with probability given by the ratio of the (unnormalised) posterior at the proposal and at the current value, and repeat. This toy chain is for intuition only; from here on we leave sampling to `Pyro`'s NUTS.

# In[6]:


metropolis_samples, exact_samples = base.metropolis_vs_exact(n_samples=1000, seed=1, show=True)
print("Metropolis mean: %.3f, exact mean: %.3f" % (np.mean(metropolis_samples), 7 / 11))


# ### 5. NUTS
#
# The same model as a `Pyro` program, fit with NUTS.

# In[7]:


globe_fit = fit(globe_binomial, globe_data)
precis(globe_fit).round(3)

