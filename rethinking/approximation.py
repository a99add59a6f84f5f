"""
Grid approximation, quadratic (Laplace) approximation and two hand-rolled
Markov chains.

These are the pedagogical contrasts the early chapters draw before handing
everything over to NUTS. Nothing here is meant to scale beyond the toy
problems they are used on.
"""
import logging

import numpy as np
import pandas as pd
import torch
from pyro import poutine
from pyro.poutine.util import site_is_subsample
from scipy import optimize, stats

from .exceptions import RethinkingError
from .sampling import _flat_names


_log = logging.getLogger(__name__)

_EPS = 1e-6


def grid_approximation(p_grid, prior, likelihood):
    """
    Input
    -------
    p_grid: grid of parameter values
    prior: prior density evaluated on p_grid (need not be normalised)
    likelihood: likelihood evaluated on p_grid

    Output
    --------
    dataframe with columns p_grid, prior, likelihood, unstd_posterior, posterior;
    posterior sums to 1.
    """
    grid_df = pd.DataFrame({"p_grid": np.asarray(p_grid, dtype=float),
                            "prior": np.broadcast_to(np.asarray(prior, dtype=float), np.shape(p_grid)),
                            "likelihood": np.asarray(likelihood, dtype=float)})
    grid_df["unstd_posterior"] = grid_df["likelihood"] * grid_df["prior"]
    total = grid_df["unstd_posterior"].sum()
    if not total > 0:
        raise RethinkingError("Posterior is zero everywhere on the grid")
    grid_df["posterior"] = grid_df["unstd_posterior"] / total
    return grid_df


def globe_grid(W, N, grid_size=20, prior=None):
    """Binomial likelihood of W waters in N tosses on a uniform grid over [0, 1]."""
    p_grid = np.linspace(0, 1, grid_size)
    prior = np.ones(grid_size) if prior is None else prior(p_grid) if callable(prior) else prior
    return grid_approximation(p_grid, prior, stats.binom.pmf(W, N, p_grid))


def sample_grid_posterior(grid_df, size=10000, seed=None):
    rng = np.random.default_rng(seed)
    return rng.choice(grid_df["p_grid"].to_numpy(), size=size, replace=True, p=grid_df["posterior"].to_numpy())


class QuapResult(object):
    """
    Multivariate normal approximation of a posterior, centred at the MAP with
    covariance equal to the inverse Hessian of the negative log joint density.
    """

    def __init__(self, mean, cov, names):
        self.names = list(names)
        self.mean = pd.Series(np.asarray(mean, dtype=float), index=self.names)
        self.cov = pd.DataFrame(np.asarray(cov, dtype=float), index=self.names, columns=self.names)

    @property
    def sd(self):
        return pd.Series(np.sqrt(np.diag(self.cov.to_numpy())), index=self.names)

    def distribution(self):
        return stats.multivariate_normal(mean=self.mean.to_numpy(), cov=self.cov.to_numpy(), allow_singular=True)

    def sample(self, size=10000, seed=None):
        draws = self.distribution().rvs(size=size, random_state=seed)
        draws = np.asarray(draws).reshape((size, len(self.names)))
        return pd.DataFrame(draws, columns=self.names)

    def precis(self, prob=0.89):
        lower, upper = (1 - prob) / 2, 1 - (1 - prob) / 2
        z = stats.norm.ppf(upper)
        return pd.DataFrame({"mean": self.mean, "sd": self.sd,
                             "%g%%" % (100 * lower): self.mean - z * self.sd,
                             "%g%%" % (100 * upper): self.mean + z * self.sd})

    def __repr__(self):
        return "QuapResult(%s)" % ", ".join("%s=%.3f" % (name, value) for name, value in self.mean.items())


def _latent_sites(model, data):
    trace = poutine.trace(model).get_trace(**data)
    sites = []
    for name, node in trace.nodes.items():
        if node["type"] != "sample" or node["is_observed"] or site_is_subsample(node):
            continue
        if node["fn"].support.is_discrete:
            raise RethinkingError("Quadratic approximation needs continuous parameters, '%s' is discrete" % name)
        sites.append((name, tuple(node["value"].shape), node["fn"].support))
    return sites


def _bounds(support, size):
    lower = getattr(support, "lower_bound", None)
    upper = getattr(support, "upper_bound", None)
    lower = None if lower is None else float(lower) + _EPS
    upper = None if upper is None else float(upper) - _EPS
    return [(lower, upper)] * size


def _start_value(bound):
    lower, upper = bound
    if lower is not None and upper is not None:
        return (lower + upper) / 2
    if lower is not None:
        return lower + 1.0
    if upper is not None:
        return upper - 1.0
    return 0.0


def quadratic_approximation(spec, start=None, **data):
    """
    Input
    -------
    spec: ModelSpec (or plain Pyro model) whose latent sites are continuous
    start: optional dict of site name vs starting value for the optimiser
    data: keyword arguments for the model, observations included

    Output
    --------
    QuapResult with MAP mean & inverse-Hessian covariance over the flattened
    latent sites, in the constrained (natural) parameterisation.
    """
    model = getattr(spec, "model", spec)
    sites = _latent_sites(model, data)
    start = start if start else {}

    names, bounds, x0 = [], [], []
    for name, shape, support in sites:
        size = int(np.prod(shape)) if shape else 1
        site_bounds = _bounds(support, size)
        names.extend(_flat_names(name, shape))
        bounds.extend(site_bounds)
        initial = np.broadcast_to(np.asarray(start.get(name, _start_value(site_bounds[0])), dtype=float), shape or ())
        x0.extend(np.ravel(initial).tolist())

    def unpack(theta):
        values, offset = {}, 0
        for name, shape, _ in sites:
            size = int(np.prod(shape)) if shape else 1
            values[name] = theta[offset:offset + size].reshape(shape)
            offset += size
        return values

    def neg_log_joint(theta):
        conditioned = poutine.condition(model, data=unpack(theta))
        return -poutine.trace(conditioned).get_trace(**data).log_prob_sum(
            site_filter=lambda name, site: not site_is_subsample(site))

    def objective(x):
        theta = torch.tensor(x, dtype=torch.get_default_dtype(), requires_grad=True)
        loss = neg_log_joint(theta)
        grad, = torch.autograd.grad(loss, theta)
        return loss.item(), grad.detach().cpu().numpy().astype(float)

    result = optimize.minimize(objective, np.asarray(x0, dtype=float), jac=True, method="L-BFGS-B", bounds=bounds)
    if not result.success:
        _log.warning("MAP search for '%s' did not converge: %s", getattr(spec, "name", model), result.message)

    theta_map = torch.tensor(result.x, dtype=torch.get_default_dtype())
    hessian = torch.autograd.functional.hessian(neg_log_joint, theta_map).detach().cpu().numpy().astype(float)
    try:
        cov = np.linalg.inv(hessian)
    except np.linalg.LinAlgError:
        raise RethinkingError("Hessian at the MAP is singular, the posterior is not locally quadratic")
    return QuapResult(result.x, cov, names)


def toy_metropolis_globe(n_samples=1000, W=6, L=3, step=0.1, start=0.5, seed=None):
    """
    Metropolis chain for the globe-tossing proportion ``p`` with a flat prior.

    Proposals falling outside [0, 1] are reflected back inside.
    """
    rng = np.random.default_rng(seed)
    p = np.zeros(n_samples)
    p[0] = start
    for i in range(1, n_samples):
        p_new = rng.normal(p[i - 1], step)
        if p_new < 0:
            p_new = abs(p_new)
        if p_new > 1:
            p_new = 2 - p_new
        q0 = stats.binom.pmf(W, W + L, p[i - 1])
        q1 = stats.binom.pmf(W, W + L, p_new)
        p[i] = p_new if rng.uniform() < q1 / q0 else p[i - 1]
    return p


def king_markov(num_weeks=100000, num_islands=10, start=None, seed=None):
    """
    The island-hopping king: islands are numbered 1..num_islands and island k
    has population proportional to k. The ring wraps around.

    Returns the island visited each week.
    """
    rng = np.random.default_rng(seed)
    positions = np.zeros(num_weeks, dtype=int)
    current = num_islands if start is None else start
    for week in range(num_weeks):
        positions[week] = current
        proposal = current + rng.choice([-1, 1])
        if proposal < 1:
            proposal = num_islands
        if proposal > num_islands:
            proposal = 1
        if rng.uniform() < proposal / current:
            current = proposal
    return positions
