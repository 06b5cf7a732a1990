"""Built-in example documents, usable as starting points."""

from __future__ import annotations

STARTER_DIAGRAM = """\
title: "Serverless ingestion"
filename: "serverless-ingestion"
theme: "light"

edges: |
  clients --> gateway [label="https", color="deepskyblue", type=dash]
  gateway --> handler [label="invoke", color="goldenrod"]
  handler --> queue [label="enqueue", color="slategray", type=dot]
  queue --> worker [label="batch", color="mediumseagreen"]
  worker --> store [label="write", color="tomato", type=solid]
  worker --> notify [label="alert", color="plum", type=dash]

layout:
  direction: LR
  xGap: 130
  yGap: 90

nodes:
  - id: clients
    label: "Producers"
    renderer: cards
    data:
      cards:
        - label: "Web"
          icons: 6
        - label: "Mobile"
          icons: 6

  - id: gateway
    label: "API gateway"
    renderer: cards
    data:
      cards:
        - label: "REST API"
          icons: 8

  - id: handler
    label: "Request handler"
    renderer: code
    data:
      code: |
        interface EventEnvelope {
          request_id: string;
          tenant_id: string;
          payload: Record<string, unknown>;
        }

  - id: queue
    label: "Queue"
    renderer: cards
    data:
      cards:
        - label: "Buffer"
          icons: 8

  - id: worker
    label: "Worker"
    renderer: cards
    data:
      cards:
        - label: "Processor"
          icons: 8

  - id: store
    label: "Document store"
    renderer: image

  - id: notify
    label: "Alarms"
    renderer: markdown
    data:
      markdown: |
        ### Notifications
        - dead letter depth > threshold
        - handler error rate > 1%
"""

PIPELINE_DIAGRAM = """\
title: "Event processing pipeline"
filename: "event-processing-pipeline"
theme: "dark"

edges: |
  ingest --> queue [label="publish"]
  queue --> workers [label="consume"]
  workers --> warehouse [label="load"]
  workers <--> alerts [label="notify"]

layout:
  direction: TB
  xGap: 120
  yGap: 80

nodes:
  - id: ingest
    label: "Event ingest"
    renderer: cards
    data:
      cards:
        - label: "API"
          icons: 4
        - label: "SDK"
          icons: 4

  - id: queue
    label: "Message queue"
    renderer: cards
    data:
      cards:
        - label: "Broker"
          icons: 8

  - id: workers
    label: "Transform workers"
    renderer: code
    data:
      code: |
        interface Event {
          id: string;
          source: string;
          created_at: string;
        }

  - id: warehouse
    label: "Analytics warehouse"
    renderer: image

  - id: alerts
    label: "Ops alerts"
    renderer: markdown
    data:
      markdown: |
        ### Alert rules
        - retry failures > 5%
        - queue lag > 30s
"""

ORG_MAP_DIAGRAM = """\
title: "Org capability map"
filename: "org-capability-map"

edges: |
  product --> platform [label="handoff"]
  platform --> growth [label="enable"]
  growth --> product [label="feedback"]

layout:
  direction: TB
  yGap: 140

nodes:
  - id: product
    label: "Product"
    renderer: groupCard
    data:
      caption: "Owns roadmap"
    ids: [roadmap, research]

  - id: platform
    label: "Platform"
    renderer: groupCard
    data:
      caption: "Runs shared systems"
    nodes:
      - id: infra
        label: "Infrastructure"
      - id: tooling
        label: "Developer tooling"

  - id: growth
    label: "Growth"
    renderer: groupCard
    ids: [research]

  - id: roadmap
    label: "Roadmap"
  - id: research
    label: "User research"
    renderer: markdown
    data:
      markdown: |
        - interviews
        - usage analytics
"""

EXAMPLES: dict[str, str] = {
    "starter": STARTER_DIAGRAM,
    "pipeline": PIPELINE_DIAGRAM,
    "org-map": ORG_MAP_DIAGRAM,
}
