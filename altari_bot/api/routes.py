from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from altari_bot.errors import WebhookSignatureError
from altari_bot.services.github_webhook import validate_payload

router = APIRouter()


@router.post('/onGitHubPush', response_class=PlainTextResponse)
async def on_github_push(request: Request):
    print("[WEBHOOK][on_github_push]", flush=True)
    settings = request.app.state.get_settings()
    body = await request.body()

    try:
        payload = validate_payload(body, request.headers, settings.GITHUB_WEBHOOK_SECRET)
    except WebhookSignatureError as exc:
        print(f"[WEBHOOK][signature_invalid] error={exc} dev={settings.SERVER_DEV}", flush=True)
        if not settings.SERVER_DEV:
            raise HTTPException(status_code=403, detail='INVALID_SIGNATURE') from exc
        payload = body

    print(f"[WEBHOOK][payload] bytes={len(payload)}", flush=True)
    accepted = request.app.state.shutdown_signal.trigger('bye')
    print(f"[WEBHOOK][exit_by_push] accepted={int(accepted)}", flush=True)
    return 'ok'
