"""LearnScore - lesson progress and competency scoring engine."""
