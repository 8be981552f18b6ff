"""Box calculator application layer around :mod:`cartonizer_core`."""
