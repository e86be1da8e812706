import logging
from pathlib import Path
from typing import Final

import pyarrow as pa
import pyarrow.parquet as pq

from ..models import Session

logger = logging.getLogger(__name__)


class SessionParquetWriter:
    """
    Writes a finalized session as two columnar files.

    - `<id>_scan_path.parquet`: one row per gaze point.
    - `<id>_signals.parquet`: one row per signal sample, all signals stacked.
    """
    _SCAN_PATH_SCHEMA: Final[pa.Schema] = pa.schema([
        # Unix Epoch, seconds
        ("timestamp", pa.float64()),
        ("tracking_state", pa.string()),

        # Screen space
        ("x", pa.float32()),
        ("y", pa.float32()),
        ("orientation", pa.int8()),
    ])

    _SIGNALS_SCHEMA: Final[pa.Schema] = pa.schema([
        ("signal_name", pa.dictionary(pa.int32(), pa.string())),
        ("timestamp", pa.float64()),
        ("tracking_state", pa.string()),
        ("value", pa.float32()),
    ])

    def __init__(self, output_dir: Path, compression: str = "zstd") -> None:
        self.output_dir = Path(output_dir)
        self.compression = compression

    def write(self, session: Session) -> tuple[Path, Path]:
        """
        Returns:
            Paths of the scan path file and the signals file.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        scan_path_file = self.output_dir / f"{session.id}_scan_path.parquet"
        signals_file = self.output_dir / f"{session.id}_signals.parquet"

        pq.write_table(self._scan_path_table(session), scan_path_file, compression=self.compression)
        pq.write_table(self._signals_table(session), signals_file, compression=self.compression)

        logger.info(
            f"Parquet export of {session.id}: {len(session.scan_path):,} gaze points -> {scan_path_file.name}, "
            f"{sum(len(s) for s in session.signals.values()):,} signal samples -> {signals_file.name}"
        )
        return scan_path_file, signals_file

    def _scan_path_table(self, session: Session) -> pa.Table:
        size = len(session.scan_path)

        # Pre-allocate flat columns
        ts, state = [None] * size, [None] * size
        xs, ys, orientation = [None] * size, [None] * size, [None] * size

        for i, g in enumerate(session.scan_path):
            ts[i], state[i] = g.timestamp, g.tracking_state
            xs[i], ys[i] = g.x, g.y
            orientation[i] = g.orientation

        return pa.Table.from_arrays(
            [
                pa.array(ts, type=pa.float64()),
                pa.array(state, type=pa.string()),
                pa.array(xs, type=pa.float32()),
                pa.array(ys, type=pa.float32()),
                pa.array(orientation, type=pa.int8()),
            ],
            schema=self._SCAN_PATH_SCHEMA,
        )

    def _signals_table(self, session: Session) -> pa.Table:
        names, ts, state, values = [], [], [], []

        for name, samples in session.signals.items():
            for s in samples:
                names.append(name)
                ts.append(s.timestamp)
                state.append(s.tracking_state)
                values.append(s.value)

        return pa.Table.from_arrays(
            [
                pa.array(names, type=pa.string()).dictionary_encode(),
                pa.array(ts, type=pa.float64()),
                pa.array(state, type=pa.string()),
                pa.array(values, type=pa.float32()),
            ],
            schema=self._SIGNALS_SCHEMA,
        )
