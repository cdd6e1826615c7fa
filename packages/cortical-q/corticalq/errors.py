"""Define errors and error messages for the cortical-q package."""

ERROR_STAGE_COUNT_MISMATCH = (
    "Got {num_stages} feature stages for {num_descriptors} stage descriptors."
)
ERROR_STAGE_INPUT_SHAPE = (
    "Stage {index} expects input of shape {expected} but the previous layer "
    "produces {actual}."
)
ERROR_ESTIMATOR_SHAPE = (
    "Value estimator maps {estimator_inputs} inputs to {estimator_outputs} outputs, "
    "but the agent needs {state_size} inputs and {num_actions} outputs."
)
ERROR_SENSORY_FRAME_SHAPE = "Sensory frame must have shape {expected}, got {actual}."


class ShapeMismatchError(ValueError):
    """Raised when adjacent components disagree on the shape they exchange."""
