"""
Kernel layer.

Deterministic integer kernels used by the pool engine. `kernels/python/`
holds the production implementations; they are pure and carry no state.
"""
