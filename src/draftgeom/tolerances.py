"""Tolerance constants for geometric calculations.

Every float comparison in the kernel reads its threshold from here. Functions
that compare floats take an ``eps`` or ``tolerance`` keyword defaulting to
one of these values.
"""

# General linear tolerance for point equality and zero-length vectors.
LINEAR: float = 1e-9

# Degeneracy threshold for the intersection engine (parallel lines,
# concentric circles, tangency, parameter range slack).
INTERSECTION_EPS: float = 1e-10

# Squared length below which a segment is treated as a single point.
ZERO_LENGTH_SQ: float = 1e-14

# Uniform scale magnitude below which a block reference cannot be inverted.
SCALE_EPS: float = 1e-12

# Semi-axis length below which an ellipse is not hit-testable.
DEGENERATE_AXIS: float = 1e-12

# Default samples per span for uniform cubic B-spline evaluation.
SPLINE_SEGMENTS_PER_SPAN: int = 16

# Default segment count for full-ellipse evaluation.
ELLIPSE_SEGMENTS: int = 64

# Upper bound on scan lines generated for one hatch pattern pass.
MAX_HATCH_LINES: int = 2000

# Smallest hatch spacing accepted at construction.
MIN_HATCH_SPACING: float = 0.01
