"""
kernelhost - Bootstrap and lifecycle for language-agnostic Jupyter kernels.

Installs kernel specs into Jupyter and brings up kernel instances: the
connection file is loaded, services are assembled, and the execution
engine, heartbeat and shell listeners are started in order.
"""

__version__ = "1.0.0"
