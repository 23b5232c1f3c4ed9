"""Top‑level package for the Mood Budget app.

A personal budget tracker where every purchase carries the mood it was
made in.  The primary modules are:

* ``budget`` – the budget ledger: transactions, savings and monthly reset
* ``mood_aggregation`` – daily spending totals with a mood-weighted score
* ``advisor`` / ``chat`` – the Gemini-backed financial advisor chat
* ``visualization`` – functions that generate Plotly figures

To run the dashboard from the command line you can execute:

```bash
python run_dashboard.py
```

which starts Streamlit with ``mood_budget/Home.py`` as the entry page.
"""

from . import data_processing  # noqa: F401  # re-exported for convenience
from . import mood_aggregation  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .moods import Mood  # noqa: F401


__all__ = ["data_processing", "mood_aggregation", "visualization", "Mood"]
