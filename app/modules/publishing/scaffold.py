"""
Files added to every published repository so it runs on Deno Deploy without
edits, plus the mapping of generated artifacts to repository paths.
"""

import json
import re
from typing import Dict

from app.modules.deployments.schemas import GeneratedFiles

REQUIRED_ENV_VARS = ["SUPABASE_URL", "SUPABASE_SERVICE_KEY", "JWT_SECRET"]
ENTRY_POINT = "main.js"

README_TEMPLATE = """# {board_name}

Project generated by **Intent Flow Designer**

## 🚀 Deployment

This project is configured for automatic deployment on **Deno Deploy**.

### Auto-Deploy from GitHub
Every push to `main` triggers an automatic deployment.

## 📦 Structure

- `entities/` - JSON schemas for the database entities
- `pages/` - React pages of the application
- `components/` - Reusable React components
- `main.js` - Backend API entry point (Deno)

## 🔧 Environment Variables

Configure these secrets in Deno Deploy:

```
SUPABASE_URL=https://xxx.supabase.co
SUPABASE_SERVICE_KEY=eyJ...
JWT_SECRET=your-jwt-secret
OPENAI_API_KEY=sk-... (optional)
```

## 🏃 Local Development

```bash
# Install Deno
curl -fsSL https://deno.land/install.sh | sh

# Run locally
deno task start
```

## 📝 Deploying on Deno Deploy

1. Go to {deploy_url}
2. Click "Deploy from GitHub"
3. Select this repository
4. Entry point: `{entry_point}`
5. Configure the environment variables
6. Deploy! 🎉

---

Generated with ❤️ by Intent Flow Designer
"""

GITIGNORE = """.env
.env.local
.DS_Store
node_modules/
*.log
.vscode/
.idea/"""

DENO_CONFIG = {
    "tasks": {
        "start": "deno run --allow-net --allow-env --allow-read main.js",
    },
    "imports": {
        "npm:@supabase/supabase-js": "npm:@supabase/supabase-js@^2.39.0",
    },
}

# __STATUS_MESSAGE__ is replaced with a JSON string literal
MAIN_JS_TEMPLATE = """import { serve } from "https://deno.land/std@0.168.0/http/server.ts";
import { createClient } from "npm:@supabase/supabase-js@^2.39.0";

const supabaseUrl = Deno.env.get("SUPABASE_URL");
const supabaseKey = Deno.env.get("SUPABASE_SERVICE_KEY");

if (!supabaseUrl || !supabaseKey) {
    console.error("Missing SUPABASE_URL or SUPABASE_SERVICE_KEY");
    Deno.exit(1);
}

const supabase = createClient(supabaseUrl, supabaseKey);

const corsHeaders = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
};

function json(body, status = 200) {
    return new Response(JSON.stringify(body), {
        status,
        headers: { ...corsHeaders, "Content-Type": "application/json" },
    });
}

serve(async (req) => {
    const path = new URL(req.url).pathname;

    if (req.method === "OPTIONS") {
        return new Response(null, { headers: corsHeaders });
    }

    if (path === "/health" || path === "/") {
        return json({
            status: "ok",
            message: __STATUS_MESSAGE__,
            timestamp: new Date().toISOString(),
        });
    }

    if (path.startsWith("/api/")) {
        // Add API routes here, e.g. GET /api/users
        return json({ message: "API endpoint not implemented yet", path }, 404);
    }

    return json({ error: "Not found" }, 404);
});

console.log("Server ready on port 8000");
"""

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.\- ]")


def safe_file_name(name: str) -> str:
    """Reduce a generated item name to a single path segment."""
    cleaned = _UNSAFE_NAME_CHARS.sub("_", name.replace("\\", "/").split("/")[-1]).strip(" .")
    return cleaned or "unnamed"


def synthesized_files(board_name: str, deploy_url: str) -> Dict[str, str]:
    return {
        "README.md": README_TEMPLATE.format(
            board_name=board_name, deploy_url=deploy_url, entry_point=ENTRY_POINT
        ),
        "deno.json": json.dumps(DENO_CONFIG, indent=2),
        ".gitignore": GITIGNORE,
        ENTRY_POINT: MAIN_JS_TEMPLATE.replace(
            "__STATUS_MESSAGE__", json.dumps(f"{board_name} API is running")
        ),
    }


def _unique_path(files: Dict[str, str], directory: str, name: str, extension: str) -> str:
    """Path for the item that does not collide with one already mapped (Task.json, Task_2.json, ...)."""
    stem = safe_file_name(name)
    path = f"{directory}/{stem}{extension}"
    suffix = 2
    while path in files:
        path = f"{directory}/{stem}_{suffix}{extension}"
        suffix += 1
    return path


def build_repository_files(board_name: str, generated: GeneratedFiles, deploy_url: str) -> Dict[str, str]:
    """Path -> content for every file of the published repository."""
    files = synthesized_files(board_name, deploy_url)
    for name, schema in generated.entities.items():
        files[_unique_path(files, "entities", name, ".json")] = schema
    for name, code in generated.pages.items():
        files[_unique_path(files, "pages", name, ".jsx")] = code
    for name, code in generated.components.items():
        files[_unique_path(files, "components", name, ".jsx")] = code
    if generated.layout:
        files["Layout.jsx"] = generated.layout
    return files
