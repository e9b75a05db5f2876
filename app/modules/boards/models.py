# Supabase tables: boards, development_classes, personas, use_cases
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (owned by the board editor, read-only here):

boards
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- nodes: jsonb (default: []) - ordered list of {id, data: {level, title, objective}}
- created_at: timestamp (default: now())

development_classes
- id: uuid (primary key)
- board_id: uuid (foreign key to boards.id)
- name: text
- description: text (nullable)
- created_at: timestamp (default: now())

personas
- id: uuid (primary key)
- board_id: uuid (foreign key to boards.id)
- name: text
- description: text (nullable)
- created_at: timestamp (default: now())

use_cases
- id: uuid (primary key)
- board_id: uuid (foreign key to boards.id)
- title: text
- steps: jsonb (default: []) - ordered list of {action}
- created_at: timestamp (default: now())
"""
