"""Reporting package."""

from cost_manager.reports.engine import ReportEngine, convert, round_money

__all__ = ["ReportEngine", "convert", "round_money"]
