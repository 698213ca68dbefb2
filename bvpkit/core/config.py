"""Solver configuration."""

from dataclasses import dataclass

from bvpkit.exceptions import ConfigurationError


# Converged solves whose defect exceeds this are rejected (mesh is halved).
DEFAULT_DEFECT_THRESHOLD = 0.1

# Hard bound on the number of mesh subintervals.
DEFAULT_MAX_NUM_SUBINTERVALS = 3000


@dataclass(frozen=True)
class SolverConfig:
    """
    Options shared by every solve.

    Attributes:
        abstol: Target defect norm; also passed to the nonlinear solver
        adaptive: Refine the mesh until the defect norm meets abstol. When
            False exactly one nonlinear solve is performed.
        dt: Uniform initial step; required unless u0 is a trajectory
        max_num_subintervals: Upper bound on mesh subintervals
        defect_threshold: Defect norm above which a converged solve is
            rejected regardless of abstol
        verbose: Emit user-facing notices (e.g. ignored initial guesses)
    """

    abstol: float = 1e-3
    adaptive: bool = True
    dt: float = 0.0
    max_num_subintervals: int = DEFAULT_MAX_NUM_SUBINTERVALS
    defect_threshold: float = DEFAULT_DEFECT_THRESHOLD
    verbose: bool = True

    def __post_init__(self) -> None:
        if not self.abstol > 0:
            raise ConfigurationError(
                "abstol must be positive", context=f"abstol={self.abstol}"
            )
        if self.max_num_subintervals < 1:
            raise ConfigurationError(
                "max_num_subintervals must be at least 1",
                context=f"max_num_subintervals={self.max_num_subintervals}",
            )
        if not self.defect_threshold > 0:
            raise ConfigurationError(
                "defect_threshold must be positive",
                context=f"defect_threshold={self.defect_threshold}",
            )
