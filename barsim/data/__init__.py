"""barsim.data

Bar sources. None of them are part of the core; any object with a matching
``get_bars`` will do.
"""

from barsim.data.alpaca import AlpacaDataSource
from barsim.data.base import BarRequest, DataSource
from barsim.data.csvfile import CsvDataSource, load_bars_csv

__all__ = ["AlpacaDataSource", "BarRequest", "CsvDataSource", "DataSource", "load_bars_csv"]
