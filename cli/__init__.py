"""Command line tools for inspecting load test reports."""
