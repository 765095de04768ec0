from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class ScoringRules:
    base_score: int = 100
    time_bonus_per_second: int = 5
    level_bonus: int = 50
    hint_penalty: int = 20

    def time_bonus(self, time_remaining: int) -> int:
        return int(math.floor(max(0, time_remaining) * self.time_bonus_per_second))

    def level_bonus_for(self, level_index: int) -> int:
        return (level_index + 1) * self.level_bonus

    def victory_score(self, time_remaining: int, level_index: int) -> int:
        return self.base_score + self.time_bonus(time_remaining) + self.level_bonus_for(level_index)

    def apply_hint_penalty(self, score: int) -> int:
        # Never drops below zero
        return max(0, score - self.hint_penalty)
