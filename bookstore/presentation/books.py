from typing import List

from fastapi import APIRouter, Depends, status

from bookstore.application.catalog import (
    BookDTO,
    CreateBookUseCase,
    DeleteBookUseCase,
    GetBookUseCase,
    ListBooksUseCase,
    UpdateBookUseCase,
)
from bookstore.domain.models import Book, Identity
from bookstore.presentation.dependencies import (
    get_create_book_use_case,
    get_current_identity,
    get_delete_book_use_case,
    get_get_book_use_case,
    get_list_books_use_case,
    get_update_book_use_case,
)
from bookstore.presentation.schemas import BookRequest, ErrorResponse

router = APIRouter(prefix="/books", tags=["Books"])


@router.get("", response_model=List[Book])
async def list_books(use_case: ListBooksUseCase = Depends(get_list_books_use_case)):
    return await use_case()


@router.get("/{book_id}", response_model=Book, responses={404: {"model": ErrorResponse}})
async def get_book(book_id: str, use_case: GetBookUseCase = Depends(get_get_book_use_case)):
    return await use_case(book_id)


@router.post(
    "",
    response_model=Book,
    responses={400: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED,
)
async def create_book(
    request: BookRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: CreateBookUseCase = Depends(get_create_book_use_case),
):
    return await use_case(BookDTO.model_validate(request.model_dump(exclude_unset=True)))


@router.put("/{book_id}", response_model=Book, responses={404: {"model": ErrorResponse}})
async def update_book(
    book_id: str,
    request: BookRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: UpdateBookUseCase = Depends(get_update_book_use_case),
):
    """Merge the supplied fields over the stored book"""
    return await use_case(book_id, BookDTO.model_validate(request.model_dump(exclude_unset=True)))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: str,
    identity: Identity = Depends(get_current_identity),
    use_case: DeleteBookUseCase = Depends(get_delete_book_use_case),
):
    await use_case(book_id)
