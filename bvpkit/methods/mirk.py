"""Standard MIRK method tableaux (Enright & Muir / Cash & Singhal families)."""

from enum import Enum
import numpy as np
from bvpkit.core.method import MIRKTableau, extension_stage
from bvpkit.exceptions import ConfigurationError


class MIRKVariant(Enum):
    """Closed set of MIRK methods, valued by order."""
    MIRK2 = 2
    MIRK3 = 3
    MIRK4 = 4
    MIRK5 = 5
    MIRK6 = 6


def _extension(c, recipe):
    """
    Interpolation stages (c_star, v_star, x_star) from (abscissa, parents) pairs.

    Each stage is built by extension_stage from the stages it lists as
    parents, which may include earlier interpolation stages.
    """
    nodes = list(c)
    s_star = len(c) + len(recipe)
    v_star = np.zeros(len(recipe))
    x_star = np.zeros((len(recipe), s_star))
    for r, (c_r, parents) in enumerate(recipe):
        v_star[r], x_star[r, list(parents)] = extension_stage(
            c_r, [nodes[j] for j in parents]
        )
        nodes.append(c_r)
    return np.array([c_r for c_r, _ in recipe]), v_star, x_star


def mirk2() -> MIRKTableau:
    """One-stage midpoint MIRK method (2nd order)."""
    return MIRKTableau(
        order=2,
        c=np.array([0.5]),
        v=np.array([0.5]),
        b=np.array([1.0]),
        x=np.array([[0.0]]),
        c_star=np.array([0.0]),
        v_star=np.array([0.0]),
        x_star=np.array([[0.0, 0.0]]),
        tau_star=0.25,
    )


def mirk3() -> MIRKTableau:
    """Two-stage Radau-type MIRK method (3rd order)."""
    return MIRKTableau(
        order=3,
        c=np.array([0.0, 2.0/3.0]),
        v=np.array([0.0, 4.0/9.0]),
        b=np.array([0.25, 0.75]),
        x=np.array([
            [0.0, 0.0],
            [2.0/9.0, 0.0],
        ]),
        c_star=np.array([1.0]),
        v_star=np.array([1.0]),
        x_star=np.array([[0.0, 0.0, 0.0]]),
        tau_star=0.25,
    )


def mirk4() -> MIRKTableau:
    """
    Three-stage Lobatto-type MIRK method (4th order).

    Discrete stages sit at t_i, t_{i+1} and the Hermite midpoint, giving the
    Simpson quadrature. The interpolation stage is the cubic Hermite value
    at 3/4.
    """
    return MIRKTableau(
        order=4,
        c=np.array([0.0, 1.0, 0.5]),
        v=np.array([0.0, 1.0, 0.5]),
        b=np.array([1.0/6.0, 1.0/6.0, 2.0/3.0]),
        x=np.array([
            [0.0, 0.0, 0.0],
            [0.0, 0.0, 0.0],
            [1.0/8.0, -1.0/8.0, 0.0],
        ]),
        c_star=np.array([0.75]),
        v_star=np.array([27.0/32.0]),
        x_star=np.array([[3.0/64.0, -9.0/64.0, 0.0, 0.0]]),
        tau_star=0.226,
    )


def mirk5() -> MIRKTableau:
    """
    Four-stage MIRK method (5th order).

    Only the endpoint stages and the Hermite stage at 3/4 are accurate
    enough to build on. Three extension stages at 1/4, 1/2 and 3/4 are
    exact for quartics and carry O(h^5) stage errors; the interpolant spans
    them together with the endpoint stages.
    """
    c = np.array([0.0, 1.0, 0.75, 0.3])
    c_star, v_star, x_star = _extension(c, [
        (0.25, (0, 1, 2)),
        (0.5, (0, 1, 2)),
        (0.75, (0, 1, 2)),
    ])
    return MIRKTableau(
        order=5,
        c=c,
        v=np.array([0.0, 1.0, 27.0/32.0, 837.0/1250.0]),
        b=np.array([5.0/54.0, 1.0/14.0, 32.0/81.0, 250.0/567.0]),
        x=np.array([
            [0.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 0.0],
            [3.0/64.0, -9.0/64.0, 0.0, 0.0],
            [21.0/1000.0, 63.0/5000.0, -252.0/625.0, 0.0],
        ]),
        c_star=c_star,
        v_star=v_star,
        x_star=x_star,
        tau_star=0.3,
        interp_support=(0, 1, 4, 5, 6),
    )


def mirk6() -> MIRKTableau:
    """
    Five-stage MIRK method with Boole quadrature (6th order).

    The extension is bootstrapped in two levels from the endpoint stages
    and the Hermite stages at 1/4 and 3/4: stages at 3/8 and 5/8 with
    O(h^5) errors, then four stages at 1/5 .. 4/5 with O(h^6) errors that
    span the interpolant with the endpoint stages.
    """
    c = np.array([0.0, 1.0, 0.25, 0.75, 0.5])
    hermite, refined = (0, 1, 2, 3), (0, 1, 5, 6)
    c_star, v_star, x_star = _extension(c, [
        (0.375, hermite),
        (0.625, hermite),
        (0.2, refined),
        (0.4, refined),
        (0.6, refined),
        (0.8, refined),
    ])
    return MIRKTableau(
        order=6,
        c=c,
        v=np.array([0.0, 1.0, 5.0/32.0, 27.0/32.0, 0.5]),
        b=np.array([7.0/90.0, 7.0/90.0, 16.0/45.0, 16.0/45.0, 2.0/15.0]),
        x=np.array([
            [0.0, 0.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 0.0, 0.0],
            [9.0/64.0, -3.0/64.0, 0.0, 0.0, 0.0],
            [3.0/64.0, -9.0/64.0, 0.0, 0.0, 0.0],
            [-5.0/24.0, 5.0/24.0, 2.0/3.0, -2.0/3.0, 0.0],
        ]),
        c_star=c_star,
        v_star=v_star,
        x_star=x_star,
        tau_star=0.7156,
        interp_support=(0, 1, 7, 8, 9, 10),
    )


_CONSTRUCTORS = {
    MIRKVariant.MIRK2: mirk2,
    MIRKVariant.MIRK3: mirk3,
    MIRKVariant.MIRK4: mirk4,
    MIRKVariant.MIRK5: mirk5,
    MIRKVariant.MIRK6: mirk6,
}


def construct_mirk(order: int) -> MIRKTableau:
    """Look up the tableau of the MIRK method with the given order."""
    try:
        variant = MIRKVariant(order)
    except ValueError:
        raise ConfigurationError(
            f"No MIRK method of order {order}",
            context=f"available orders: {[v.value for v in MIRKVariant]}",
        ) from None
    return _CONSTRUCTORS[variant]()
