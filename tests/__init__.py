# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Test suite for MemAlchemy.

This package contains tests for all components of MemAlchemy:
- Unit tests for keys, annotation analysis, relations and value creators
- Graph synthesis tests
- In-memory store commit and rebinding tests
"""
