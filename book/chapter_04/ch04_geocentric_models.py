#!/usr/bin/env python
# coding: utf-8

# ## Chapter 04: Geocentric Models
#
# Linear regression as a Gaussian model of the mean. The `cars` data records the speed (mph) of 50 cars and the distance (ft) they took to stop. We model stopping distance as Gaussian with a mean that depends linearly on speed:
# <br>
# <br>
# $dist_i \sim Normal(\mu_i, \sigma)$
# <br>
# $\mu_i = a + b (speed_i - \bar{speed})$
# <br>
# <br>
# Centring speed makes $a$ the expected stopping distance at the average speed.

# In[1]:


import pyro
import matplotlib.pyplot as plt

from rethinking import fit, precis
from rethinking.approximation import quadratic_approximation
from rethinking.chapter04 import base, cars_linear, cars_poly

pyro.set_rng_seed(1)
plt.style.use('default')


# #### Data

# In[2]:


cars_df = base.load_data()
cars_data = base.transform_data(cars_df)
cars_df.describe().round(2)


# ### 1. Prior predictive simulation
#
# Before fitting, what lines do the priors allow? With $b \sim Normal(0, 10)$ half of the lines have stopping distance *decreasing* with speed, and many predict negative distances. The log-normal prior keeps slopes positive.

# In[3]:


speed_bar = cars_data["speed_bar"].item()
base.plot_prior_lines(base.prior_predictive_lines(num_lines=100, b_prior="normal", seed=2971), speed_bar, show=True)
base.plot_prior_lines(base.prior_predictive_lines(num_lines=100, b_prior="lognormal", seed=2971), speed_bar, show=True)


# ### 2. Fitting the linear model

# In[4]:


cars_linear.show()
linear_fit = fit(cars_linear, base.linear_data(cars_data))
precis(linear_fit).round(3)


# The quadratic approximation lands in the same place for a model this simple.

# In[5]:


quadratic_approximation(cars_linear, **base.linear_data(cars_data)).precis().round(3)


# ### 3. Posterior predictions
#
# The orange band is the 89% interval of $\mu$, the grey band the 89% interval of simulated stopping distances.

# In[6]:


base.plot_posterior_fit(cars_df, linear_fit, speed_bar, show=True)


# ### 4. Polynomial regression
#
# With standardized speed $x$, a parabola $\mu = a + b_1 x + b_2 x^2$.

# In[7]:


cars_poly.show()
poly_fit = fit(cars_poly, base.poly_data(cars_data))
precis(poly_fit).round(3)

