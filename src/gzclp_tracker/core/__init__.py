"""Pure progression, loading and medal logic."""
