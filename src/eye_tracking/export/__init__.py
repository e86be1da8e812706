from .parquet import SessionParquetWriter

__all__ = ["SessionParquetWriter"]
