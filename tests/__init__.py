# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors
