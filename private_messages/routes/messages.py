from fastapi import APIRouter, Depends, HTTPException
from ..schemas.messages import MessageIn, MessageOut, UnreadCountOut, ActionOkOut
from ..crud import (
    send_message,
    read_message,
    mark_message_deleted,
    list_inbox,
    list_sent,
    list_dialog,
    count_unread
)
from ..errors import MessageNotFound, PersistenceError
from typing import List
from ..auth import get_current_user
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post('/', response_model=MessageOut)
async def send(payload: MessageIn, current_user: dict = Depends(get_current_user)):
    try:
        return await send_message(current_user['id'], payload.recipient_id, payload.content)
    except PersistenceError as e:
        raise HTTPException(409, 'Message could not be saved') from e

@router.get('/inbox', response_model=List[MessageOut])
async def inbox(unread: bool = False, current_user: dict = Depends(get_current_user)):
    return await list_inbox(current_user['id'], unread_only=unread)

@router.get('/sent', response_model=List[MessageOut])
async def sent(current_user: dict = Depends(get_current_user)):
    return await list_sent(current_user['id'])

@router.get('/unread-count', response_model=UnreadCountOut)
async def unread_count(current_user: dict = Depends(get_current_user)):
    return {'unread': await count_unread(current_user['id'])}

@router.get('/dialog/{peer_id}', response_model=List[MessageOut])
async def dialog(peer_id: int, current_user: dict = Depends(get_current_user)):
    return await list_dialog(current_user['id'], peer_id)

@router.get('/{message_id}', response_model=MessageOut)
async def read(message_id: int, current_user: dict = Depends(get_current_user)):
    try:
        return await read_message(message_id, current_user['id'])
    except MessageNotFound:
        raise HTTPException(404, 'Message not found')
    except PersistenceError as e:
        raise HTTPException(409, 'Message could not be saved') from e

@router.delete('/{message_id}', response_model=ActionOkOut)
async def delete(message_id: int, current_user: dict = Depends(get_current_user)):
    try:
        await mark_message_deleted(message_id, current_user['id'])
    except MessageNotFound:
        raise HTTPException(404, 'Message not found')
    except PersistenceError as e:
        raise HTTPException(409, 'Message could not be deleted') from e
    logger.info({'msg': 'message_deleted', 'message_id': message_id, 'user_id': current_user['id']})
    return {'ok': True}
