"""Top‑level package for FinTrack, a personal expense tracker.

The core pipeline is pure and UI-free:

* ``validation`` – checks expense input before it is stored
* ``filters`` – date-range filtering and ordering of records
* ``aggregation`` – totals, category breakdowns, monthly trends and insights
* ``reports`` – chart series, export rows and the combined ``Report``
* ``export`` – CSV and PDF output

``store``, ``auth`` and ``live`` provide persistence, accounts and snapshot
subscriptions.  The Streamlit app lives in ``Home.py`` and ``pages/``:

```bash
python run_app.py
```
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import filters  # noqa: F401  # re-exported for convenience
from . import reports  # noqa: F401  # re-exported for convenience
from . import validation  # noqa: F401  # re-exported for convenience
from .errors import AuthError, FinTrackError, StoreError
from .reports import Report, build_report

__all__ = [
    "aggregation",
    "filters",
    "reports",
    "validation",
    "AuthError",
    "FinTrackError",
    "StoreError",
    "Report",
    "build_report",
]
