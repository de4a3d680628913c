"""
Depreciation kernel: errors, structured logging and domain value objects.

The kernel has no dependency on the engines or asset modules.
"""
