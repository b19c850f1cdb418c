from fastapi import APIRouter
from src.api.v0.auth.main import router as auth_router
from src.api.v0.post.main import router as post_router
from src.api.v0.comment.main import router as comment_router

router = APIRouter(prefix="/api")
router.include_router(auth_router)
router.include_router(post_router)
router.include_router(comment_router)
