from .report_formatter import ReportFormatter, render_text

__all__ = ['ReportFormatter', 'render_text']
