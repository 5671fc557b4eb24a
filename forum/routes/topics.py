from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, Request, Response, UploadFile
from sqlalchemy.orm import Session

from forum.responses import success
from forum.routes.params import id_list, page_params
from forum.schemas import PageParams
from forum.services.role_service import RoleService
from forum.services.topic_service import TopicService

MAX_ID = 2_147_483_647


def build_router(get_db_dep):
    router = APIRouter(prefix="/api/v1", tags=["topics"])

    def get_role_service(request: Request, db: Session = Depends(get_db_dep)) -> RoleService:
        return RoleService(db, request)

    def get_topic_service(
        roles: RoleService = Depends(get_role_service),
        paging: PageParams = Depends(page_params),
    ) -> TopicService:
        return TopicService(roles.db, viewer_id=roles.user_id(), paging=paging)

    @router.get("/topics")
    def get_list(topics: TopicService = Depends(get_topic_service)):
        return success(topics.get_list({}, True))

    @router.post("/topics", status_code=201)
    def create(
        name: Optional[str] = Form(default=None),
        description: Optional[str] = Form(default=None),
        cover: Optional[UploadFile] = File(default=None),
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        roles.manager_id_or_fail()

        topic_id = topics.create(name, description, cover)
        return success(topics.get(topic_id, True))

    @router.delete("/topics")
    def delete_multiple(
        topic_id: Optional[str] = Query(default=None),
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        roles.manager_id_or_fail()

        topics.delete_multiple(id_list(topic_id))
        return success()

    @router.get("/topics/{topic_id}")
    def get_one(
        topic_id: int = Path(ge=1, le=MAX_ID),
        topics: TopicService = Depends(get_topic_service),
    ):
        return success(topics.get_or_fail(topic_id, True))

    @router.patch("/topics/{topic_id}")
    def update_one(
        topic_id: int = Path(ge=1, le=MAX_ID),
        name: Optional[str] = Form(default=None),
        description: Optional[str] = Form(default=None),
        cover: Optional[UploadFile] = File(default=None),
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        roles.manager_id_or_fail()

        topics.update(topic_id, name, description, cover)
        return success(topics.get(topic_id, True))

    @router.delete("/topics/{topic_id}")
    def delete_one(
        topic_id: int = Path(ge=1, le=MAX_ID),
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        roles.manager_id_or_fail()

        topics.delete(topic_id)
        return success()

    @router.get("/users/{user_id}/following_topics")
    def get_following(
        user_id: int = Path(ge=1, le=MAX_ID),
        topics: TopicService = Depends(get_topic_service),
    ):
        return success(topics.get_following(user_id, True))

    @router.get("/user/following_topics")
    def get_my_following(
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        user_id = roles.user_id_or_fail()

        return success(topics.get_following(user_id, True))

    @router.get("/topics/{topic_id}/followers")
    def get_followers(
        topic_id: int = Path(ge=1, le=MAX_ID),
        topics: TopicService = Depends(get_topic_service),
    ):
        return success(topics.get_followers(topic_id, True))

    @router.post("/topics/{topic_id}/followers")
    def add_follow(
        topic_id: int = Path(ge=1, le=MAX_ID),
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        user_id = roles.user_id_or_fail()

        topics.add_follow(user_id, topic_id)
        return success({"follower_count": topics.get_follower_count(topic_id)})

    @router.delete("/topics/{topic_id}/followers")
    def delete_follow(
        topic_id: int = Path(ge=1, le=MAX_ID),
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        user_id = roles.user_id_or_fail()

        topics.delete_follow(user_id, topic_id)
        return success({"follower_count": topics.get_follower_count(topic_id)})

    @router.get("/trash/topics")
    def get_deleted_list(
        roles: RoleService = Depends(get_role_service),
        topics: TopicService = Depends(get_topic_service),
    ):
        roles.manager_id_or_fail()

        return success(topics.get_list({"is_deleted": True}, True))

    # Trash recovery is not wired to the service yet: these answer with a
    # bare empty response and touch nothing.
    @router.post("/trash/topics")
    def restore_multiple():
        return Response()

    @router.delete("/trash/topics")
    def destroy_multiple():
        return Response()

    @router.post("/trash/topics/{topic_id}")
    def restore_one(topic_id: int = Path(ge=1, le=MAX_ID)):
        return Response()

    @router.delete("/trash/topics/{topic_id}")
    def destroy_one(topic_id: int = Path(ge=1, le=MAX_ID)):
        return Response()

    return router
