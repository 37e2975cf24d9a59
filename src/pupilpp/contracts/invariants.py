"""Formal pipeline invariants.

This file documents what each stage MUST produce. It is a reviewer anchor
and system reference, not executable code.
"""

PIPELINE_INVARIANTS = {
    "validity": [
        "One boolean mask per stage, same length as the raw series",
        "Stages only invalidate: a sample dropped by one stage never comes back",
        "Non-finite raw samples are always invalid",
        "An all-invalid mask is a legal result, not an error",
    ],

    "reconstruction": [
        "Output length == round_half_up(output_rate / source_rate * n_source_samples)",
        "Output starts at time 0 and spans the raw recording duration",
        "Samples before the first and after the last valid raw sample are NaN",
        "Fewer than 2 valid samples yields Degraded with an all-NaN signal",
        "Valid sample indices are strictly increasing raw positions",
    ],

    "combination": [
        "Preconditions (eye labels, rate, unit, length) checked before numeric work",
        "Mean is NaN only where both eyes are NaN",
        "Components 'left', 'right' and 'mean' are aligned with the output",
        "Result is Degraded when either eye is degraded",
    ],

    "segments": [
        "Bounds clamped to the recording; fully outside yields count 0 and NaN stats",
        "Every segment reports every eye-role of the signal, for both views",
        "Percentages lie in [0, 100]",
        "min <= mean <= max whenever mean is defined",
    ],

    "output": [
        "Written channel type is derived from the source (<modality>_pp_<eye> or <modality>_pp_c)",
        "'add' appends; 'replace' overwrites the last channel of the same type",
        "Nothing is written when an InvalidInputError is raised",
    ],
}
