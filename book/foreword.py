#!/usr/bin/env python
# coding: utf-8

# ## Foreword

# ### Objective:
#
# - Work through the examples of *Statistical Rethinking* (McElreath) in `Pyro`.
# - Keep the model, the data and the fit side-by-side, so the reader can execute every step.
#
# ### Approach
#
# Every chapter follows the same loop:
#
# 1. **load** a bundled dataset with `pandas`,
# 2. **declare** a model: the short model text, as the book writes it, next to the `Pyro` program that implements it,
# 3. **fit** it with the NUTS sampler,
# 4. **summarise** the posterior draws (`precis`, intervals, WAIC) and
# 5. **plot**.
#
# The hard parts, Hamiltonian Monte Carlo and automatic differentiation, are left to `Pyro` and `PyTorch`. The early chapters show grid approximation, quadratic approximation and a hand-rolled Metropolis chain only to build intuition; they are abandoned as soon as NUTS takes over.
#
# Fits are cached as CSV files (`RETHINKING_CACHE_DIR`, default `~/.cache/rethinking`) so that re-rendering a chapter does not re-run the sampler. Set `RETHINKING_USE_CACHE=0` to force a fresh fit.
#
# ### Organization
#
# - Chapter 02: Small Worlds and Large Worlds (globe tossing, grid & quadratic approximation)
# - Chapter 03: Sampling the Imaginary (intervals, point estimates, posterior predictive)
# - Chapter 04: Geocentric Models (linear & polynomial regression on `cars`)
# - Chapter 07: Ulysses' Compass (lppd & WAIC)
# - Chapter 09: Markov Chain Monte Carlo (King Markov, wild & non-identifiable chains)
# - Chapter 11: God Spiked the Integers (binomial & Poisson regression)
# - Chapter 13: Models with Memory (varying intercepts)

# In[1]:


import rethinking

print("Bundled datasets: %s" % rethinking.list_datasets())

