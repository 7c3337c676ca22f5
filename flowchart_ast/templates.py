from jinja2 import DictLoader, Environment, select_autoescape

templates = Environment(
    loader=DictLoader({
        "flow.md": "```mermaid\nflowchart TD;\n{{ body }}```\n",
        "index.html": """
        <!doctype html>
        <html><head><meta charset='utf-8'><title>Flowchart preview</title>
        <style>
            body{font-family:system-ui,Segoe UI,Roboto,Helvetica,Arial;padding:24px;}
            .card{border:1px solid #ddd;border-radius:12px;padding:16px;margin-bottom:16px;box-shadow:0 1px 2px rgba(0,0,0,.04)}
            .error{background:#fee;color:#900;padding:8px;border-radius:8px}
            pre{background:#f6f8fa;padding:12px;border-radius:8px;overflow:auto}
        </style>
        <script type="module">
            import mermaid from "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.esm.min.mjs";
            mermaid.initialize({ startOnLoad: true });
        </script>
        </head>
        <body>
        <h1>Function flowchart</h1>
        <div class="card">
            <form action="/preview" method="post">
                <h3>Function name</h3>
                <input name="start" value="{{ start }}">
                <h3>Python source</h3>
                <textarea name="code" rows="14" style="width:100%" placeholder="paste Python code...">{{ code }}</textarea>
                <br/><button>Render</button>
            </form>
        </div>
        {% if error %}
        <div class="card"><div class="error">{{ error }}</div></div>
        {% endif %}
        {% if report %}
        <div class="card">
            <div><strong>{{ report.function }}</strong> ({{ report.path }}:{{ report.lineno }}), {{ report.blocks }} blocks</div>
            <pre class="mermaid">flowchart TD;
{{ report.mermaid }}</pre>
            <details>
                <summary>Mermaid source</summary>
                <pre>{{ report.markdown }}</pre>
            </details>
        </div>
        {% endif %}
        </body></html>
        """,
    }),
    autoescape=select_autoescape(["html"]),
    keep_trailing_newline=True,
)


def render_template(name: str, **ctx) -> str:
    return templates.get_template(name).render(**ctx)
