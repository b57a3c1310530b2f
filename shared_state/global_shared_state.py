# Shared between importers, the repeater and exporters of a single run.
# Importers publish where dashboards came from (grafana_url, grafana_organization_id),
# exporters may read it back.
GLOBAL_SHARED_STATE = {
    "EXPORTERS_SHARED_STATE": {},
}
