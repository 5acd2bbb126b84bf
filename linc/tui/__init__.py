# SPDX-License-Identifier: MIT
"""Terminal UI for browsing and editing Linear issues."""
