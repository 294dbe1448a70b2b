from campcheck.metrics.metrics import collect_metrics, write_metrics

__all__ = ["collect_metrics", "write_metrics"]
