# appoptics

A Python client for the AppOptics metrics API. It provides:

- services for the REST resources alerts, annotations, services, spaces,
  jobs, snapshots and measurements, each built on a shared `Client`;
- thread-safe in-process counters and aggregators (count / sum / min / max /
  last), grouped by name in a `MeasurementSet`;
- a `Reporter` that flushes a `MeasurementSet` to the measurements API every
  15 seconds, tagging each measurement with the host name;
- a `BatchPersister` that packs measurements into batches of at most 1000 and
  stops after repeated persistence errors;
- a small `SimpleClient` that posts measurement batches as plain JSON to a
  fixed URL.

## Installation

```
pip install appoptics
```

For running the test suite:

```
pip install "appoptics[test]"
pytest
```

## Talking to the API

Every resource has its own service class that takes a `Client`:

```python
from appoptics.client import Client
from appoptics.spaces import SpacesService
from appoptics.alerts import AlertsService

client = Client("token", user_agent="my-app")

spaces = SpacesService(client)
space = spaces.create("CPUs")
for found in spaces.list(client.default_pagination_parameters(5)):
    print(found.id, found.name)

alerts = AlertsService(client)
for alert in alerts.list().alerts:
    print(alert.id, alert.name)
```

The services available are:

| Module                  | Service              | Operations |
|-------------------------|----------------------|------------|
| `appoptics.alerts`      | `AlertsService`      | `list`, `retrieve`, `create`, `update`, `delete`, `status`, `associate_to_service`, `disassociate_from_service` |
| `appoptics.annotations` | `AnnotationsService` | `list`, `retrieve`, `retrieve_event`, `create`, `update_stream`, `update_event`, `delete` |
| `appoptics.services`    | `ServicesService`    | `list`, `retrieve`, `create`, `update`, `delete` |
| `appoptics.spaces`      | `SpacesService`      | `list`, `retrieve`, `create`, `update`, `delete` |
| `appoptics.jobs`        | `JobsService`        | `retrieve` |
| `appoptics.snapshots`   | `SnapshotsService`   | `create`, `retrieve` |
| `appoptics.measurements`| `MeasurementsService`| `create` |

Responses are returned as dataclasses (`Alert`, `Space`, `Job`, `Snapshot`,
and so on) built with their `from_dict` class methods.

Requests go out as gzip-compressed JSON with basic authentication
(user `token`, password the API token). The User-Agent header is the
`user_agent` you give followed by `:appoptics-api`, or just `appoptics-api`.
A response with status 400 or above raises `appoptics.errors.ErrorResponse`,
whose string form is the status followed by the error details as compact JSON:

```python
from appoptics.errors import ErrorResponse

try:
    spaces.retrieve(129)
except ErrorResponse as exc:
    print(exc)   # e.g. 403 Forbidden - {"request":["..."]}
```

A different endpoint can be set with `base_url`, a preconfigured
`requests.Session` with `session`, and `debug=True` logs requests that carry a
body and every response through the `logging` module.

`PaginationParameters` (in `appoptics.pagination`) holds offset, length,
ordering and sort direction; `default_pagination_parameters(length)` orders by
name ascending.

## Sending measurements

```python
from appoptics.client import Client
from appoptics.measurements import MeasurementsService, new_measurement, new_measurements_batch

service = MeasurementsService(Client("token"))
measurement = new_measurement("jobs.processed")
measurement.value = 1
batch = new_measurements_batch([measurement], {"env": "staging"})
service.create(batch)
```

`new_measurements_batch` stamps the batch with the current Unix time.

`appoptics.legacy_client.SimpleClient(url, token)` posts a batch as plain JSON
to `url`. Its `post` raises `ValueError` when no token is set and
`appoptics.errors.BadStatusError` when the server answers with a status other
than 200 or 202.

## Collecting and reporting in-process metrics

```python
from appoptics.client import Client
from appoptics.measurement_set import MeasurementSet, TaggedMeasurementSet
from appoptics.measurements import MeasurementsService
from appoptics.reporter import Reporter

measurements = MeasurementSet()
measurements.incr("requests")
measurements.update_aggregator_value("latency_ms", 12.5)

per_route = TaggedMeasurementSet(measurements, {"route": "/health"})
per_route.incr("requests")

reporter = Reporter(measurements, MeasurementsService(Client("token")), "myapp.")
reporter.start()
# ... run the application ...
reporter.stop()
```

Each flush resets the set: counters that stayed at zero and aggregators that
saw no values are left out of the report, and a `num_measurements` counter is
added. Tagged keys (built by `appoptics.tags.metric_with_tags`) are turned back
into a metric name plus tags when reported, and names are cleaned of any
character outside `A-Za-z0-9.:_-`. Each upload is attempted up to three times
before it is given up. `Reporter.post_pending()` posts whatever is queued
right away.

`MultiReporter` drives several reporters from one `MeasurementSet` on a shared
schedule.

## Batching with an error limit

```python
from appoptics.batching import BatchPersister

persister = BatchPersister(MeasurementsService(Client("token")), send_stats=True)
persister.start()
persister.submit([new_measurement("queue.depth")])
persister.stop_batching()
persister.join(timeout=5)
```

Full batches of 1000 are pushed at once; smaller ones every
`maximum_push_interval` milliseconds (2000 by default). After `error_limit`
(5) persistence errors, batching stops. With `send_stats=False` batches are
only logged, not sent.

## What this package does not cover

There are no service classes for the metrics, charts or API-token resources,
and no single object that bundles all services together: construct each
service from a `Client` yourself. The package has no command-line tool.