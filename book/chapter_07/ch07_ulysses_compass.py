#!/usr/bin/env python
# coding: utf-8

# ## Chapter 07: Ulysses' Compass
#
# How well will a model predict data it has not seen? WAIC estimates out-of-sample deviance from the posterior alone. We compute it by hand for a regression of stopping distance on speed, then use it to compare a linear and a quadratic model.

# In[1]:


from rethinking import fit, precis, waic
from rethinking.chapter07 import base, cars_speed, cars_speed_quadratic


# #### Data & quadratic approximation

# In[2]:


cars_data = base.load_data()
cars_speed.show()
quap_draws = base.quap_samples(cars_speed, cars_data, size=1000, seed=94)
precis(quap_draws).round(3)


# ### 1. WAIC by hand
#
# For every observation $i$ and every posterior sample $s$, compute the log-likelihood $\log p(y_i | \theta_s)$. Then
#
# - $lppd_i = \log \frac{1}{S} \sum_s p(y_i | \theta_s)$,
# - the penalty $p_{WAIC,i}$ is the variance of $\log p(y_i | \theta_s)$ across samples,
# - $WAIC = -2 \sum_i (lppd_i - p_{WAIC,i})$.

# In[3]:


pointwise_df, totals = base.waic_by_hand(cars_speed, quap_draws, cars_data)
print(totals.round(2))
pointwise_df.sort_values("pWAIC", ascending=False).head().round(3)


# The cars with the largest penalty are the ones the model finds most surprising: their log-likelihood swings the most across posterior samples.

# ### 2. Comparing models with NUTS draws

# In[4]:


linear_fit = fit(cars_speed, cars_data)
quadratic_fit = fit(cars_speed_quadratic, cars_data)
print(waic(cars_speed, linear_fit, **cars_data).round(2))

base.compare_models(cars_data, {cars_speed: linear_fit, cars_speed_quadratic: quadratic_fit}).round(2)

