"""Weighted reservoir sampling for light selection.

A reservoir streams (candidate, weight) pairs and keeps exactly one candidate
in O(1) memory. After processing a stream of any length, the kept candidate was
chosen with probability proportional to its weight, independent of arrival
order:

    update(x, w):  wsum += w;  m += 1;  replace y with x with probability w / wsum

Once the stream ends, finalize() turns the reservoir into an unbiased
resampled-importance-sampling estimate by computing

    W = (1 / p_hat(y)) * (wsum / m)

where p_hat is the target function the weights were built from. A zero target
value forces W = 0 so no NaN leaks into shading.

Combining several reservoirs (spatial or temporal reuse) is not provided:
merging requires re-weighting each input's wsum by the target function
evaluated at that reservoir's chosen sample, and callers needing it must supply
that weighting themselves.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> @ti.kernel
    ... def pick() -> ti.i32:
    ...     r = empty_reservoir()
    ...     for i in range(4):
    ...         r = reservoir_update(r, i, 1.0)
    ...     return r.y
"""

import taichi as ti
import taichi.math as tm

# Candidate id meaning "nothing selected yet"
NO_CANDIDATE = -1


@ti.dataclass
class Reservoir:
    """Streaming weighted sampler state.

    Attributes:
        y: Selected candidate id, NO_CANDIDATE until a positive weight arrives.
        wsum: Running sum of all weights seen.
        m: Number of candidates seen.
        w: Final unbiased contribution weight, set by reservoir_finalize().
    """

    y: ti.i32
    wsum: ti.f32
    m: ti.i32
    w: ti.f32


@ti.func
def empty_reservoir() -> Reservoir:
    """Create a reservoir that has seen no candidates."""
    return Reservoir(y=NO_CANDIDATE, wsum=0.0, m=0, w=0.0)


@ti.func
def reservoir_update(r: Reservoir, candidate: ti.i32, weight: ti.f32) -> Reservoir:
    """Feed one weighted candidate into the reservoir.

    Args:
        r: Current reservoir state.
        candidate: Candidate id.
        weight: Non-negative resampling weight.

    Returns:
        The updated reservoir. m is always incremented by exactly one; y only
        changes when the running weight sum is positive.
    """
    wsum = r.wsum + weight
    y = r.y
    if wsum > 0.0:
        if ti.random(ti.f32) < weight / wsum:
            y = candidate
    return Reservoir(y=y, wsum=wsum, m=r.m + 1, w=r.w)


@ti.func
def reservoir_finalize(r: Reservoir, p_hat: ti.f32, eps: ti.f32) -> Reservoir:
    """Compute the unbiased contribution weight of the selected candidate.

    Args:
        r: Reservoir after the whole stream was processed.
        p_hat: Target function evaluated at r.y.
        eps: Floor for p_hat and m in the denominators.

    Returns:
        The reservoir with w set; w is 0 when p_hat is 0.
    """
    w = 0.0
    if p_hat > 0.0:
        w = (1.0 / tm.max(p_hat, eps)) * (r.wsum / tm.max(ti.cast(r.m, ti.f32), eps))
    return Reservoir(y=r.y, wsum=r.wsum, m=r.m, w=w)
