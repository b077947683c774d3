from fastapi import APIRouter, Response

router = APIRouter(tags=["health"])


@router.get("/health", status_code=204)
def health():
    return Response(status_code=204)
