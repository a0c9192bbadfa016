"""Database schema for Group Browser.

Tables are populated by the import pipeline and the status snapshot job.
The query layer only creates them when missing so a fresh database can be
opened for reading.
"""

SCHEMA = """
CREATE TABLE IF NOT EXISTS tenants (
    id TEXT PRIMARY KEY,
    slug TEXT UNIQUE,
    name TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS creatives (
    external_id TEXT PRIMARY KEY,
    tenant_id TEXT NOT NULL,
    page_name TEXT,
    title TEXT,
    body TEXT,
    caption TEXT,
    cards_json TEXT,
    media_type TEXT NOT NULL DEFAULT 'IMAGE',
    start_date TIMESTAMP,
    end_date TIMESTAMP,
    cluster_id INTEGER,
    media_ref TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (tenant_id) REFERENCES tenants(id)
);

CREATE TABLE IF NOT EXISTS cluster_groups (
    tenant_id TEXT NOT NULL,
    cluster_id INTEGER NOT NULL,
    member_count INTEGER NOT NULL DEFAULT 0,
    representative_id TEXT,
    description TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (tenant_id, cluster_id),
    FOREIGN KEY (tenant_id) REFERENCES tenants(id)
);

CREATE TABLE IF NOT EXISTS group_status_snapshots (
    tenant_id TEXT NOT NULL,
    cluster_id INTEGER NOT NULL,
    label TEXT,
    new_count INTEGER,
    diff_count INTEGER,
    stale_cycles INTEGER,
    previous_snapshot_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY (tenant_id, cluster_id)
);

CREATE INDEX IF NOT EXISTS idx_creatives_tenant_cluster ON creatives(tenant_id, cluster_id, external_id);
CREATE INDEX IF NOT EXISTS idx_creatives_tenant_page ON creatives(tenant_id, page_name);
CREATE INDEX IF NOT EXISTS idx_creatives_tenant_media ON creatives(tenant_id, media_type);
CREATE INDEX IF NOT EXISTS idx_groups_tenant_count ON cluster_groups(tenant_id, member_count DESC, cluster_id);
CREATE INDEX IF NOT EXISTS idx_groups_tenant_created ON cluster_groups(tenant_id, created_at, cluster_id);
"""
