"""
app/api/auth.py

Purpose: Wallet-linking web endpoints

- GET  /auth/{chat_id}           signing page (reads nothing, writes nothing)
- GET  /auth-redirect/{chat_id}  302 to the device-appropriate signing target
- POST /auth/callback            verifies the signature and links the wallet

The page asks the browser wallet to personal-sign the challenge for the
chat and posts {chatId, account, signature, message} back to the callback.
"""

import html
import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.api.deps import get_linker
from app.core.logging import get_logger
from app.schemas.auth import AuthCallbackRequest, LinkResult
from app.services.identity_service import IdentityLinker, build_challenge_message

logger = get_logger(__name__)
router = APIRouter()


def _js_string(value: str) -> str:
    # "</script>" inside a literal would close the script element
    return json.dumps(value).replace("<", "\\u003c")


def render_auth_page(chat_id: str) -> str:
    """
    Signing page for one chat identity.

    Values reach the script through json.dumps and the markup through
    html.escape.
    """
    message = build_challenge_message(chat_id)
    chat_id_js = _js_string(chat_id)
    message_js = _js_string(message)

    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Link your wallet</title>
        <style>
            * {{
                margin: 0;
                padding: 0;
                box-sizing: border-box;
            }}

            body {{
                font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                background: linear-gradient(135deg, #1f4037 0%, #99f2c8 100%);
                display: flex;
                justify-content: center;
                align-items: center;
                min-height: 100vh;
                padding: 20px;
            }}

            .container {{
                background: white;
                border-radius: 20px;
                box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3);
                padding: 40px 30px;
                max-width: 500px;
                width: 100%;
                text-align: center;
            }}

            h1 {{
                color: #2d3748;
                font-size: 24px;
                margin-bottom: 10px;
            }}

            .message-box {{
                background: #f7fafc;
                border: 2px dashed #1f4037;
                border-radius: 12px;
                padding: 16px;
                margin: 24px 0;
                font-family: monospace;
                word-break: break-all;
            }}

            button {{
                background: #1f4037;
                color: white;
                border: none;
                border-radius: 10px;
                padding: 14px 28px;
                font-size: 16px;
                cursor: pointer;
            }}

            #status {{
                margin-top: 20px;
                color: #4a5568;
                font-size: 14px;
            }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1>🔗 Link your wallet</h1>
            <p>Sign this message to connect your wallet to your Telegram account:</p>
            <div class="message-box">{html.escape(message)}</div>
            <button id="sign">Connect &amp; Sign</button>
            <div id="status"></div>
        </div>
        <script>
            const chatId = {chat_id_js};
            const message = {message_js};
            const status = document.getElementById("status");

            document.getElementById("sign").addEventListener("click", async () => {{
                if (!window.ethereum) {{
                    status.textContent = "No wallet found. Open this page in your wallet's browser.";
                    return;
                }}
                try {{
                    const [account] = await window.ethereum.request({{ method: "eth_requestAccounts" }});
                    const signature = await window.ethereum.request({{
                        method: "personal_sign",
                        params: [message, account],
                    }});
                    const response = await fetch("/auth/callback", {{
                        method: "POST",
                        headers: {{ "Content-Type": "application/json" }},
                        body: JSON.stringify({{ chatId, account, signature, message }}),
                    }});
                    const result = await response.json();
                    status.textContent = response.ok
                        ? "✅ Wallet linked! You can return to Telegram."
                        : "❌ " + (result.error || "Linking failed");
                }} catch (err) {{
                    status.textContent = "❌ " + (err.message || err);
                }}
            }});
        </script>
    </body>
    </html>
    """


@router.get("/auth/{chat_id}", response_class=HTMLResponse)
async def auth_page(chat_id: str):
    """
    Serves the signing page. No state is read or written.
    """
    logger.info("Auth page served", extra={"chat_id": chat_id})
    return HTMLResponse(content=render_auth_page(chat_id))


@router.get("/auth-redirect/{chat_id}")
async def auth_redirect(chat_id: str, request: Request, linker: IdentityLinker = Depends(get_linker)):
    """
    Sends mobile browsers to the wallet deep link and everything else to
    the signing page.
    """
    target = linker.build_challenge_target(chat_id, request.headers.get("user-agent"))
    return RedirectResponse(url=target, status_code=302)


@router.post("/auth/callback", response_model=LinkResult)
async def auth_callback(body: AuthCallbackRequest, linker: IdentityLinker = Depends(get_linker)):
    """
    Verifies the signed challenge and links the wallet.

    Responses:
        200: Linked
        400: Missing field, bad address, unexpected message, bad or
             mismatched signature
        500: Store failure
    """
    return await linker.verify_link(
        chat_id=body.chat_id,
        claimed_address=body.account,
        signature=body.signature,
        message=body.message,
    )
