"""
UI template for the Dockmon service.

A single page with a login form, a container picker and a live log view. The
page keeps its own log buffer in the browser with search, level colouring,
autoscroll and download.
"""

import json

from .config import Config


def get_monitor_ui_html(app_config: Config) -> str:
    """
    Generate the HTML content for the log monitor.

    Args:
        app_config: Settings whose stream section tunes the client

    Returns:
        str: Complete HTML content for the log monitor
    """
    client_settings = json.dumps({
        "reconnectDelay": app_config.stream.reconnect_delay,
        "refreshInterval": 30000,
        "nearBottomThreshold": 100
    })

    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Dockmon - Docker Log Monitor</title>
        <style>
            {_get_css_styles()}
        </style>
    </head>
    <body>
        <div class="header">
            <h1>Docker Log Monitor</h1>
            <div class="control-group" id="user-bar" hidden>
                <span id="user-name"></span>
                <button class="stop-btn" id="stop-btn" onclick="stopMonitoring()" hidden>Stop Monitoring</button>
                <button class="refresh-btn" onclick="logout()">Log out</button>
            </div>
        </div>

        <div class="login" id="login-panel" hidden>
            <form id="login-form" onsubmit="return login(event)">
                <input type="text" id="username" placeholder="Username" autocomplete="username" required>
                <input type="password" id="password" placeholder="Password" autocomplete="current-password" required>
                <button type="submit" class="refresh-btn">Log in</button>
                <div class="error" id="login-error"></div>
            </form>
        </div>

        <div class="layout" id="monitor-panel" hidden>
            <div class="sidebar">
                <div class="controls">
                    <button class="refresh-btn" onclick="refreshContainers()">Refresh</button>
                    <span id="filter-info"></span>
                </div>
                <div class="error" id="containers-error"></div>
                <div id="container-list"></div>
            </div>

            <div class="viewer">
                <div class="status disconnected" id="status">
                    <span id="status-text">Select a container to view logs</span>
                </div>
                <div class="controls">
                    <input type="text" id="search" placeholder="Search logs..." oninput="renderLogs()">
                    <button class="refresh-btn" id="autoscroll-btn" onclick="toggleAutoScroll()">Auto-scroll: on</button>
                    <button class="refresh-btn" onclick="downloadLogs()">Download</button>
                    <button class="clear-btn" onclick="clearLogs()">Clear Logs</button>
                </div>
                <div class="error" id="stream-error"></div>
                <div class="log-container" id="log-container" onscroll="handleScroll()"></div>
            </div>
        </div>

        <script>
            {_get_javascript_code(client_settings)}
        </script>
    </body>
    </html>
    """


def _get_css_styles() -> str:
    """Get the CSS styles for the log monitor."""
    return """
        body {
            font-family: 'Courier New', monospace;
            background-color: #1a1a1a;
            color: #ffffff;
            margin: 0;
            padding: 20px;
        }

        .header {
            background-color: #2a2a2a;
            padding: 15px;
            border-radius: 5px;
            margin-bottom: 20px;
            display: flex;
            justify-content: space-between;
            align-items: center;
        }

        .layout {
            display: grid;
            grid-template-columns: 2fr 5fr;
            gap: 20px;
        }

        .login form {
            background-color: #2a2a2a;
            padding: 20px;
            border-radius: 5px;
            max-width: 320px;
            margin: 40px auto;
            display: flex;
            flex-direction: column;
            gap: 10px;
        }

        input {
            background-color: #3a3a3a;
            color: #ffffff;
            border: 1px solid #555;
            padding: 6px 10px;
            border-radius: 3px;
            font-family: 'Courier New', monospace;
        }

        #search {
            flex: 1;
        }

        .controls {
            background-color: #2a2a2a;
            padding: 10px;
            border-radius: 5px;
            margin-bottom: 10px;
            display: flex;
            gap: 10px;
            align-items: center;
            flex-wrap: wrap;
        }

        .control-group {
            display: flex;
            gap: 10px;
            align-items: center;
        }

        .container-entry {
            background-color: #2a2a2a;
            border: 1px solid #444;
            border-radius: 3px;
            padding: 8px;
            margin-bottom: 8px;
            cursor: pointer;
        }

        .container-entry.selected {
            border-color: #007acc;
        }

        .container-name {
            color: #00ff00;
            font-weight: bold;
        }

        .container-meta {
            color: #cccccc;
            font-size: 11px;
        }

        .log-container {
            background-color: #1a1a1a;
            border: 1px solid #333;
            border-radius: 5px;
            height: 70vh;
            overflow-y: auto;
            padding: 10px;
            font-size: 12px;
            line-height: 1.4;
        }

        .log-entry {
            margin-bottom: 2px;
            padding: 2px 5px;
            word-wrap: break-word;
            white-space: pre-wrap;
        }

        .log-entry:hover {
            background-color: #2a2a2a;
        }

        .timestamp {
            color: #888;
            font-size: 10px;
            margin-right: 8px;
        }

        .level-error { color: #ff5555; }
        .level-warning { color: #ffff00; }
        .level-info { color: #55aaff; }
        .level-debug { color: #888; }
        .level-default { color: #00ff00; }

        .status {
            background-color: #2a2a2a;
            padding: 10px;
            border-radius: 5px;
            margin-bottom: 10px;
        }

        .status.connected { color: #00ff00; }
        .status.connecting { color: #ffff00; }
        .status.disconnected { color: #ff0000; }

        .error {
            color: #ff5555;
            margin-bottom: 5px;
        }

        .refresh-btn {
            background-color: #007acc;
            color: #ffffff;
            border: none;
            padding: 6px 12px;
            border-radius: 3px;
            cursor: pointer;
            font-family: 'Courier New', monospace;
        }

        .clear-btn, .stop-btn {
            background-color: #ff4444;
            color: white;
            border: none;
            padding: 6px 12px;
            border-radius: 3px;
            cursor: pointer;
        }
    """


def _get_javascript_code(client_settings: str) -> str:
    """Get the JavaScript code for the log monitor."""
    return f"""
        const settings = {client_settings};
        let token = localStorage.getItem('token');
        let websocket = null;
        let selectedContainer = '';
        let logs = [];
        let autoScroll = true;
        let refreshTimer = null;

        function authHeaders() {{
            return {{ 'Content-Type': 'application/json', 'Authorization': `Bearer ${{token}}` }};
        }}

        function escapeHtml(text) {{
            const div = document.createElement('div');
            div.textContent = text;
            return div.innerHTML;
        }}

        function classifyLevel(text) {{
            const lower = text.toLowerCase();
            if (lower.includes('error') || lower.includes('err')) return 'error';
            if (lower.includes('warn')) return 'warning';
            if (lower.includes('info')) return 'info';
            if (lower.includes('debug')) return 'debug';
            return 'default';
        }}

        function showPanel(loggedIn, username) {{
            document.getElementById('login-panel').hidden = loggedIn;
            document.getElementById('monitor-panel').hidden = !loggedIn;
            document.getElementById('user-bar').hidden = !loggedIn;
            document.getElementById('user-name').textContent = username || '';
        }}

        async function checkAuth() {{
            if (!token) {{
                showPanel(false);
                return;
            }}
            const response = await fetch('/api/verify', {{ headers: authHeaders() }});
            if (response.ok) {{
                const data = await response.json();
                onLoggedIn(data.user.username);
            }} else {{
                localStorage.removeItem('token');
                token = null;
                showPanel(false);
            }}
        }}

        async function login(event) {{
            event.preventDefault();
            const errorEl = document.getElementById('login-error');
            errorEl.textContent = '';
            try {{
                const response = await fetch('/api/login', {{
                    method: 'POST',
                    headers: {{ 'Content-Type': 'application/json' }},
                    body: JSON.stringify({{
                        username: document.getElementById('username').value,
                        password: document.getElementById('password').value
                    }})
                }});
                const data = await response.json();
                if (!response.ok) {{
                    errorEl.textContent = data.error || 'Login failed';
                    return false;
                }}
                token = data.token;
                localStorage.setItem('token', token);
                onLoggedIn(data.user);
            }} catch (error) {{
                errorEl.textContent = 'Network error. Please try again.';
            }}
            return false;
        }}

        async function logout() {{
            stopMonitoring();
            await fetch('/api/logout', {{ method: 'POST' }});
            localStorage.removeItem('token');
            token = null;
            clearInterval(refreshTimer);
            showPanel(false);
        }}

        function onLoggedIn(username) {{
            showPanel(true, username);
            refreshContainers();
            clearInterval(refreshTimer);
            refreshTimer = setInterval(refreshContainers, settings.refreshInterval);
        }}

        async function refreshContainers() {{
            const errorEl = document.getElementById('containers-error');
            try {{
                const response = await fetch('/api/containers', {{ headers: authHeaders() }});
                const data = await response.json();
                if (response.status === 401) {{
                    logout();
                    return;
                }}
                errorEl.textContent = response.ok ? '' : (data.error || `HTTP error ${{response.status}}`);
                renderContainers(data.containers || []);
                if (response.ok) {{
                    document.getElementById('filter-info').textContent =
                        `Filter: ${{data.filter}} | States: ${{data.stateFilter}} | ${{data.filtered}}/${{data.total}}`;
                }}
            }} catch (error) {{
                errorEl.textContent = 'Failed to fetch containers';
            }}
        }}

        function renderContainers(containers) {{
            const list = document.getElementById('container-list');
            if (containers.length === 0) {{
                list.innerHTML = '<div class="container-meta">No containers found</div>';
                return;
            }}
            list.innerHTML = containers.map(c => `
                <div class="container-entry ${{c.name === selectedContainer ? 'selected' : ''}}"
                     onclick="selectContainer('${{escapeHtml(c.name)}}')">
                    <div class="container-name">${{escapeHtml(c.name)}}</div>
                    <div class="container-meta">${{escapeHtml(c.image)}}</div>
                    <div class="container-meta">${{escapeHtml(c.status)}} (${{escapeHtml(c.state)}})</div>
                </div>
            `).join('');
        }}

        function updateStatus(text, state) {{
            document.getElementById('status-text').textContent = text;
            document.getElementById('status').className = `status ${{state}}`;
        }}

        function send(message) {{
            if (websocket && websocket.readyState === WebSocket.OPEN) {{
                websocket.send(JSON.stringify(message));
            }}
        }}

        function connectWebSocket() {{
            if (websocket && websocket.readyState <= WebSocket.OPEN) {{
                return;
            }}
            const protocol = window.location.protocol === 'https:' ? 'wss:' : 'ws:';
            websocket = new WebSocket(`${{protocol}}//${{window.location.host}}/ws`);
            updateStatus('Connecting...', 'connecting');

            websocket.onopen = function() {{
                send({{ action: 'authenticate', token: token }});
            }};

            websocket.onmessage = function(event) {{
                const message = JSON.parse(event.data);
                if (message.type === 'authenticated') {{
                    if (selectedContainer) {{
                        send({{ action: 'start', containerName: selectedContainer }});
                    }}
                }} else if (message.type === 'connected') {{
                    updateStatus(`Streaming ${{message.containerName}}`, 'connected');
                }} else if (message.type === 'disconnected') {{
                    updateStatus('Disconnected', 'disconnected');
                }} else if (message.type === 'error') {{
                    document.getElementById('stream-error').textContent = message.message || 'Unknown error';
                }} else if (message.type === 'log') {{
                    logs.push(message);
                    renderLogs();
                }}
            }};

            websocket.onclose = function(event) {{
                websocket = null;
                updateStatus('Disconnected', 'disconnected');
                if (event.code !== 1008 && selectedContainer && token) {{
                    setTimeout(connectWebSocket, settings.reconnectDelay);
                }}
            }};

            websocket.onerror = function() {{
                document.getElementById('stream-error').textContent = 'WebSocket connection error';
            }};
        }}

        function selectContainer(name) {{
            selectedContainer = name;
            clearLogs();
            document.getElementById('stop-btn').hidden = false;
            refreshContainers();
            if (websocket && websocket.readyState === WebSocket.OPEN) {{
                send({{ action: 'start', containerName: name }});
            }} else {{
                connectWebSocket();
            }}
        }}

        function stopMonitoring() {{
            send({{ action: 'stop' }});
            selectedContainer = '';
            document.getElementById('stop-btn').hidden = true;
            if (websocket) {{
                websocket.close();
            }}
            clearLogs();
            updateStatus('Select a container to view logs', 'disconnected');
        }}

        function renderLogs() {{
            const container = document.getElementById('log-container');
            const term = document.getElementById('search').value.toLowerCase();
            const visible = term ? logs.filter(log => (log.data || '').toLowerCase().includes(term)) : logs;

            if (visible.length === 0) {{
                container.innerHTML = term
                    ? `<div class="timestamp">No logs found matching "${{escapeHtml(term)}}"</div>`
                    : '<div class="timestamp">No logs available</div>';
                return;
            }}

            container.innerHTML = visible.map(log => `
                <div class="log-entry">
                    <span class="timestamp">${{new Date(log.timestamp).toLocaleTimeString()}}</span>
                    <span class="level-${{classifyLevel(log.data || '')}}">${{escapeHtml(log.data || '')}}</span>
                </div>
            `).join('');

            if (autoScroll) {{
                container.scrollTop = container.scrollHeight;
            }}
        }}

        function handleScroll() {{
            const container = document.getElementById('log-container');
            const distance = container.scrollHeight - container.scrollTop - container.clientHeight;
            setAutoScroll(distance < settings.nearBottomThreshold);
        }}

        function setAutoScroll(enabled) {{
            autoScroll = enabled;
            document.getElementById('autoscroll-btn').textContent = `Auto-scroll: ${{enabled ? 'on' : 'off'}}`;
        }}

        function toggleAutoScroll() {{
            setAutoScroll(!autoScroll);
            if (autoScroll) {{
                renderLogs();
            }}
        }}

        function clearLogs() {{
            logs = [];
            document.getElementById('stream-error').textContent = '';
            renderLogs();
        }}

        function downloadLogs() {{
            if (logs.length === 0) {{
                return;
            }}
            const text = logs
                .map(log => `[${{new Date(log.timestamp).toLocaleString()}}] ${{log.data || log.message}}`)
                .join('\\n');
            const blob = new Blob([text], {{ type: 'text/plain' }});
            const url = URL.createObjectURL(blob);
            const a = document.createElement('a');
            a.href = url;
            a.download = `${{selectedContainer}}-logs-${{new Date().toISOString().slice(0, 10)}}.txt`;
            a.click();
            URL.revokeObjectURL(url);
        }}

        checkAuth();
    """
