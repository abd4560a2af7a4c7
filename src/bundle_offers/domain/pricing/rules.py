from __future__ import annotations

# Why a tier ended up selected, in precedence order
SELECTED_BY_SHOPPER = "SHOPPER_CHOICE"
SELECTED_BEST_VALUE = "BEST_VALUE"
SELECTED_PRESELECT = "PRESELECT"
SELECTED_FIRST_TIER = "FIRST_TIER"
