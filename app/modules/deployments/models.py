# Supabase table: project_deployments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (one row per board):
- id: uuid (primary key)
- board_id: uuid (unique, foreign key to boards.id, not null)
- deployment_status: text (not null, default: 'building') - values: building, deployed, failed
- deployment_logs: jsonb (default: []) - ordered list of {timestamp, message, level}
- deployed_code: text (nullable)
- technical_specification: jsonb (nullable) - raw validated model response
- generated_files: jsonb (nullable) - {entities: {}, pages: {}, components: {}, layout}
- metrics: jsonb (nullable)
- last_deployed_at: timestamp (nullable)
- version: integer (not null, default: 0) - bumped on every write, used as optimistic lock
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
