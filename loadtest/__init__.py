"""Platform load tester.

Provisions throwaway accounts, drives each through an upload/download
workflow in concurrent cycles, and writes a timestamped JSON report.
"""

__version__ = "0.1.0"
