# SPDX-License-Identifier: MIT
"""Command line viewer for package release notes."""

__version__ = "0.1.0"
