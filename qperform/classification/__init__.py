"""
Performance classification: grades weekly QA and Production scores.

Modules
-------
thresholds : LevelConfig tables + classify() + grade() + is_underperforming()
             — pure functions, no I/O.
"""
