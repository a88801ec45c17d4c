"""Homework planner with A/B rotating school-day schedules."""
