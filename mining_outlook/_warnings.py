"""Warnings for conditions that are suspicious but not fatal to a run.

Errors stop a run before any draws (see :mod:`mining_outlook.exceptions`);
these only flag inputs or outputs worth a second look, and can be silenced
by category.

Example:
    Silence the unfunded-level warning while sweeping custom tables::

        import warnings
        from mining_outlook._warnings import ConfigurationWarning

        warnings.filterwarnings("ignore", category=ConfigurationWarning)
"""


class MiningOutlookWarning(UserWarning):
    """Base class for all mining_outlook warnings."""


class ConfigurationWarning(MiningOutlookWarning):
    """Unusual or potentially incorrect configuration parameters.

    Raised when caller-supplied constants are valid but likely unintended,
    e.g. an unfunded exploration level with a non-zero success probability.
    """


class DataQualityWarning(MiningOutlookWarning):
    """Runtime data-quality observations.

    Raised when a generated environment table contains non-finite values.
    Negative values are valid model output and never trigger this warning.
    """
