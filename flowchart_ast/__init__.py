"""
flowchart_ast: Mermaid flowcharts from the control flow of a Python function.

Usage:
    from flowchart_ast import analyze_source
    report = analyze_source("def main(x):\\n    if x > 0:\\n        return 1\\n    return 0\\n")
    print(report.markdown)
"""
from .pipeline import FlowReport, analyze_function, analyze_source
