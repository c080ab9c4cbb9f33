# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning domains.

Subpackages:
- auth: token validation
- grading: quiz grading
- quiz: quiz authoring and attempts
- progress: lesson completion ledger
- course: course read model

Modules:
- errors: shared error taxonomy
- gating: lesson unlock rules
"""
