# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""acrocat: a catalogue of acronyms tagged with categories."""
