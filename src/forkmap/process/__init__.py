# SPDX-License-Identifier: Apache-2.0
"""Process layer: channel, child runner, parent collector and fork_map."""
