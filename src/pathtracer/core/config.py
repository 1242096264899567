"""Render configuration and per-frame host flags.

Numerical guards and capacities are module-level constants, the way the rest of
the package declares them. Values the host may want to tune per session live
in RenderConfig; flags that change every tick live in FrameState.
"""

from dataclasses import dataclass

# Offset along a shadow ray to avoid re-hitting the surface it starts on
SHADOW_EPSILON = 1e-4

# Lower bound used when dividing by a target pdf or a sample count
PDF_EPSILON = 1e-5

# Below this |n.d| a ray is treated as parallel to a plane
PLANE_EPSILON = 1e-8

# Candidates drawn per pixel from the light list
DEFAULT_MAX_LIGHT_CANDIDATES = 2


@dataclass
class RenderConfig:
    """Session-level renderer configuration.

    Attributes:
        max_light_candidates: Upper bound on the number of light candidates
            streamed through the reservoir per pixel. The effective count is
            min(light count, max_light_candidates).
        rows_per_task: Number of consecutive image rows handed to one worker
            task. 1 gives one task per row; larger values trade scheduling
            overhead against load imbalance.
        num_threads: Worker count for the parallel phase. 0 lets the Taichi
            runtime use its default CPU thread pool.
        shadow_epsilon: Start offset of shadow rays.
        pdf_epsilon: Floor for the target pdf and sample count in the
            reservoir weight.
    """

    max_light_candidates: int = DEFAULT_MAX_LIGHT_CANDIDATES
    rows_per_task: int = 1
    num_threads: int = 0
    shadow_epsilon: float = SHADOW_EPSILON
    pdf_epsilon: float = PDF_EPSILON

    def __post_init__(self) -> None:
        if self.max_light_candidates < 1:
            raise ValueError(
                f"max_light_candidates must be at least 1, got {self.max_light_candidates}"
            )
        if self.rows_per_task < 1:
            raise ValueError(f"rows_per_task must be at least 1, got {self.rows_per_task}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be non-negative, got {self.num_threads}")
        if self.shadow_epsilon <= 0.0:
            raise ValueError(f"shadow_epsilon must be positive, got {self.shadow_epsilon}")
        if self.pdf_epsilon <= 0.0:
            raise ValueError(f"pdf_epsilon must be positive, got {self.pdf_epsilon}")


@dataclass
class FrameState:
    """Flags the host passes with every frame.

    Attributes:
        accumulate: Average this frame into the running mean. When False the
            frame is shown as-is and accumulation is invalidated.
        reset: Force the running mean to restart with this frame.
    """

    accumulate: bool = True
    reset: bool = False
