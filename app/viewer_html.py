VIEWER_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Rick and Morty Characters</title>
    <style>
      :root {
        --bg: #0b0f0c;
        --ink: #f3f7f2;
        --muted: #a7b3a5;
        --accent: #a3e635;
        --panel: rgba(17, 24, 19, 0.78);
        --row-hover: #374151;
        --danger: #dc2626;
      }
      body {
        margin: 0;
        padding: 2rem 1.5rem;
        min-height: 100vh;
        color: var(--ink);
        background: var(--bg);
        font-family: Futura, "Trebuchet MS", Arial, sans-serif;
      }
      h1 { color: var(--accent); text-align: center; font-size: 2.25rem; }
      .controls {
        display: flex;
        flex-wrap: wrap;
        gap: 1rem;
        justify-content: center;
        margin-bottom: 1rem;
      }
      .group { display: flex; flex-direction: column; font-size: 0.875rem; }
      .group.species { max-width: 20rem; }
      .group.species .options { display: flex; flex-wrap: wrap; gap: 0.25rem; }
      .group .title { font-weight: bold; margin-bottom: 0.25rem; }
      input[type="text"], select {
        height: 2.5rem;
        padding: 0 0.75rem;
        background: #1f2937;
        color: var(--ink);
        border: 0;
        border-radius: 0.25rem;
      }
      button {
        height: 2.5rem;
        padding: 0 1rem;
        background: var(--accent);
        color: #000;
        border: 0;
        border-radius: 0.25rem;
        font-weight: 600;
        cursor: pointer;
      }
      button:disabled { opacity: 0.5; cursor: default; }
      table { width: 100%; text-align: center; background: var(--panel); border-collapse: collapse; }
      thead { background: #111827; color: var(--accent); }
      th, td { padding: 0.5rem; }
      tbody tr { cursor: pointer; }
      tbody tr:hover { background: var(--row-hover); }
      .empty { text-align: center; margin-top: 1rem; }
      .pager { margin-top: 1.5rem; display: flex; justify-content: center; align-items: center; gap: 1rem; }
      #character-details {
        margin: 2.5rem auto 0;
        max-width: 28rem;
        text-align: center;
        background: var(--panel);
        padding: 1.5rem;
        border-radius: 0.5rem;
      }
      #character-details h2 { color: var(--accent); }
      #character-details img { margin-top: 1rem; width: 13rem; border-radius: 0.25rem; }
      #character-details button.close { margin-top: 1.5rem; background: var(--danger); color: #fff; }
      .loading { text-align: center; padding: 1rem; color: var(--muted); }
    </style>
  </head>
  <body>
    <h1>Rick and Morty Characters</h1>
    <div id="app"><div class="loading">Loading...</div></div>

    <script>
      let view = null;
      let model = null;
      let searchTimer = null;
      const SEARCH_DEBOUNCE_MS = 250;

      async function send(action) {
        const res = await fetch("/view", {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify({ view: view, action: action }),
        });
        if (!res.ok) {
          console.error("view update failed", res.status, await res.text());
          return;
        }
        const body = await res.json();
        view = body.view;
        model = body.model;
        draw();
      }

      async function boot() {
        const res = await fetch("/view");
        const body = await res.json();
        view = body.view;
        model = body.model;
        draw();
      }

      function el(tag, attrs, children) {
        const node = document.createElement(tag);
        for (const [k, v] of Object.entries(attrs || {})) {
          if (k.startsWith("on")) node.addEventListener(k.slice(2), v);
          else if (k === "text") node.textContent = v;
          else if (v === true) node.setAttribute(k, "");
          else if (v !== false && v !== null && v !== undefined) node.setAttribute(k, v);
        }
        for (const c of children || []) node.appendChild(c);
        return node;
      }

      function checkboxGroup(title, cls, options, selected, actionType) {
        const boxes = options.map((opt) =>
          el("label", {}, [
            el("input", {
              type: "checkbox",
              value: opt,
              checked: selected.includes(opt),
              onchange: () => send({ type: actionType, value: opt }),
            }),
            document.createTextNode(" " + opt),
          ])
        );
        return el("div", { class: "group " + cls }, [
          el("span", { class: "title", text: title }),
          el("div", { class: "options" }, boxes),
        ]);
      }

      function controls() {
        const q = model.query;
        const search = el("input", {
          type: "text",
          id: "search",
          placeholder: "Filter by name",
          value: q.search,
          oninput: (e) => {
            const value = e.target.value;
            clearTimeout(searchTimer);
            searchTimer = setTimeout(() => send({ type: "search", value: value }), SEARCH_DEBOUNCE_MS);
          },
        });
        const sort = el(
          "select",
          { onchange: (e) => send({ type: "sort", value: e.target.value }) },
          [["name", "Name"], ["status", "Status"], ["gender", "Gender"]].map(([v, label]) =>
            el("option", { value: v, selected: q.sort === v, text: label })
          )
        );
        const order = el("button", {
          title: "Toggle sort direction",
          text: q.order === "asc" ? "A-Z" : "Z-A",
          onclick: () => send({ type: "toggle_order" }),
        });
        const size = el(
          "select",
          { onchange: (e) => send({ type: "page_size", value: Number(e.target.value) }) },
          [10, 20, 50].map((n) => el("option", { value: n, selected: q.page_size === n, text: String(n) }))
        );
        return el("div", { class: "controls" }, [
          search,
          checkboxGroup("Status:", "status", model.options.status, q.status, "toggle_status"),
          checkboxGroup("Gender:", "gender", model.options.gender, q.gender, "toggle_gender"),
          checkboxGroup("Species:", "species", model.options.species, q.species, "toggle_species"),
          sort,
          order,
          el("label", { class: "group" }, [el("span", { text: "Page size:" }), size]),
        ]);
      }

      function table() {
        if (model.empty) return el("p", { class: "empty", text: "No characters found." });
        const head = el("thead", {}, [
          el("tr", {}, ["Name", "Status", "Gender", "Species"].map((h) => el("th", { text: h }))),
        ]);
        const rows = model.results.map((c) =>
          el("tr", { onclick: () => send({ type: "select", value: c.id }) }, [
            el("td", { text: c.name }),
            el("td", { text: c.status || "" }),
            el("td", { text: c.gender || "" }),
            el("td", { text: c.species || "" }),
          ])
        );
        return el("div", {}, [el("table", {}, [head, el("tbody", {}, rows)])]);
      }

      function pager() {
        return el("div", { class: "pager" }, [
          el("button", { text: "Previous", disabled: !model.has_prev, onclick: () => send({ type: "prev_page" }) }),
          el("span", { text: model.pager_label }),
          el("button", { text: "Next", disabled: !model.has_next, onclick: () => send({ type: "next_page" }) }),
        ]);
      }

      function details() {
        const c = model.selected;
        if (!c) return null;
        const line = (label, value) =>
          el("p", {}, [el("strong", { text: label + ": " }), document.createTextNode(value || "")]);
        return el("div", { id: "character-details" }, [
          el("h2", { text: "Selected character" }),
          line("Name", c.name),
          line("Status", c.status),
          line("Species", c.species),
          line("Gender", c.gender),
          el("img", { src: c.image, alt: c.name }),
          el("div", {}, [el("button", { class: "close", text: "Close", onclick: () => send({ type: "close" }) })]),
        ]);
      }

      function runEffects(effects) {
        for (const fx of effects || []) {
          const target = fx.replace(/^scroll_to:/, "");
          if (target === "top") {
            window.scrollTo({ top: 0, behavior: "smooth" });
          } else {
            const node = document.getElementById(target);
            if (node) node.scrollIntoView({ behavior: "smooth" });
          }
        }
      }

      function draw() {
        const root = document.getElementById("app");
        // the search box is rebuilt on every draw; keep typing uninterrupted
        const old = document.getElementById("search");
        const typing = old !== null && document.activeElement === old;
        const caret = typing ? [old.value, old.selectionStart, old.selectionEnd] : null;
        root.replaceChildren(controls(), table(), pager());
        if (caret) {
          const box = document.getElementById("search");
          box.value = caret[0];
          box.focus();
          box.setSelectionRange(caret[1], caret[2]);
        }
        const panel = details();
        if (panel) root.appendChild(panel);
        runEffects(model.effects);
      }

      boot();
    </script>
  </body>
</html>
"""
