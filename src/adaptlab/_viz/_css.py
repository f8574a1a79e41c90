"""CSS and client-side toggles for adaptlab reports."""

CSS = """
:root {
    --bg-color: #552266;
    --panel-color: #dddddd;
    --editor-color: #aaaaaa;
    --label-color: #ccaadd;
    --alloc-color: #ccffcc;
    --force-color: #ccccff;
    --success-color: #198754;
    --danger-color: #dc3545;
}

body {
    background: var(--bg-color);
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
    padding: 0;
    margin: 0;
}

a {
    text-decoration: none;
}

a:hover {
    text-decoration: underline;
}

hr {
    float: left;
    clear: both;
    width: 0;
    border: none;
}

header {
    padding: 0.5rem 1rem;
}

.page-title {
    font-size: 32px;
    color: var(--label-color);
    margin: 8px;
}

.toggles {
    color: white;
    margin: 8px;
}

/* Index */

.summary-table {
    margin: 8px;
    border-collapse: collapse;
    background: var(--panel-color);
}

.summary-table th,
.summary-table td {
    border: 1px solid black;
    padding: 4px 8px;
    text-align: right;
}

.summary-table td.lab-name {
    text-align: left;
}

.status.pass {
    color: var(--success-color);
    font-weight: bold;
}

.status.fail {
    color: var(--danger-color);
    font-weight: bold;
}

.status.skipped {
    color: #666666;
}

/* Lab pages */

.sample {
    clear: both;
}

.batch-name-lab {
    font-size: 0;
}

.batch-name {
    font-size: 16px;
    border: solid;
    display: inline;
    padding: 3px;
    margin: 3px;
    float: left;
    background: #aa88aa;
    width: 32px;
}

.time-ns,
.time-ms {
    font-size: 20px;
    display: inline;
}

.editor,
.naive {
    font-size: 14px;
    border: solid;
    display: block;
    padding: 1px;
    margin: 1px;
    float: left;
    width: 10%;
    background: var(--editor-color);
}

.archivist {
    font-size: 14px;
    border: solid;
    display: block;
    padding: 1px;
    margin: 1px;
    float: left;
    width: 75%;
    background: var(--panel-color);
}

.sample-input {
    float: left;
    clear: both;
    margin: 2px;
    font-size: 10px;
    background: white;
}

.val-constr,
.val-tuple,
.val-vec,
.val-const,
.val-art,
.val-opaque {
    display: inline-block;
    border: solid 1px #664466;
    margin: 1px;
    padding: 1px;
}

.traces {
    font-size: 8px;
    border-top: solid 1px;
    padding: 0;
    display: block;
    margin: 0;
    float: left;
    width: 100%;
}

.trace,
.force-tree,
.alloc-tree {
    display: inline-block;
    border-style: solid;
    border-color: red;
    border-width: 1px;
    font-size: 0;
    padding: 0;
    margin: 1px;
    border-radius: 5px;
}

.tr-effect {
    display: none;
    font-size: 10px;
    background-color: white;
    border-radius: 2px;
}

.tr-symbols {
    font-size: 10px;
    display: none;
}

.path {
    display: none;
    margin: 0;
    padding: 1px;
    border-radius: 1px;
    border: solid 1px #664466;
    background-color: #664466;
}

.name {
    display: none;
    font-size: 9px;
    color: black;
    background: white;
    border: solid 1px #664466;
    border-radius: 2px;
    padding: 1px;
    margin: 1px;
}

.alloc-kind-thunk {
    border-color: green;
    border-radius: 20px;
}

.alloc-kind-refcell {
    border-color: green;
    border-radius: 0;
}

.tr-force-compcache-miss {
    background: var(--force-color);
    border-color: blue;
}

.tr-force-compcache-hit {
    background: var(--force-color);
    border-color: blue;
    border-width: 4px;
    padding: 3px;
}

.tr-force-refget {
    border-radius: 0;
    border-color: blue;
}

.tr-clean-rec {
    background: #222244;
    border-color: #aaaaff;
}

.tr-clean-eval {
    background: #8888ff;
    border-color: white;
    border-width: 4px;
}

.tr-clean-edge {
    background: white;
    border-color: #aaaaff;
    border-width: 2px;
    padding: 3px;
}

.tr-alloc-loc-fresh {
    padding: 3px;
    background: var(--alloc-color);
}

.tr-alloc-loc-exists {
    padding: 3px;
    background: var(--alloc-color);
    border-width: 4px;
    border-color: green;
}

.tr-dirty {
    background: #550000;
    border-color: #ffaaaa;
}

.tr-remove {
    background: red;
    border-color: black;
    border-width: 2px;
    padding: 2px;
}

.force-tree {
    background: var(--force-color);
    border-color: blue;
}

.alloc-tree {
    background: var(--alloc-color);
    border-color: green;
}

.visited {
    border-style: dashed;
}

.no-extent {
    padding: 3px;
}

.archivist-alloc-tree-post-edit,
.archivist-force-tree-post-edit,
.archivist-alloc-tree-post-update,
.archivist-force-tree-post-update {
    display: inline;
    float: left;
    width: 24%;
    min-height: 8px;
    padding: 0;
    margin: 2px;
    background: black;
    border-radius: 20px;
    border: solid 2px purple;
}

.placeholder {
    opacity: 0.4;
}
"""

TOGGLE_JS = """
function toggleLabels(checkbox, selector, display) {
    document.querySelectorAll(selector).forEach(function (el) {
        el.style.display = checkbox.checked ? display : "none";
    });
}
"""
