"""Read-only queries over PipelineRuns and TaskRuns stored in Tekton Results."""

__version__ = "0.1.0"
