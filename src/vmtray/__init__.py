"""
vmtray

Watch and control the power state of local virtual machines.
"""

__version__ = "0.1.0"
