from __future__ import annotations

from functools import wraps
import json
import math
from typing import Optional
from urllib.parse import urlencode

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import logout
from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.utils import translation
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from .forms import AdminLoginForm
from .services.access import (
    Authorized,
    AuthFailed,
    Unauthorized,
    authenticate_and_authorize,
    check_existing_session,
)
from .services.repository import (
    InvalidEntry,
    clear_all_entries,
    delete_entry,
    get_amounts,
    get_entries,
    get_entries_paged,
    get_today_count,
    get_today_entries,
    parse_timestamp,
    save_entry,
)

SUPPORTED_LANGS = {'zh', 'zh-hant', 'en'}

TEXTS = {
    'zh': {
        'site_title': '幸運紀錄簿',
        'today_count': '今日紀錄',
        'admin_link': '管理員登入',
        'login_title': '管理員登入',
        'login_subtitle': '請輸入管理員 Email 與密碼',
        'email_label': '管理員 Email',
        'password_label': '管理員密碼',
        'password_placeholder': '請輸入密碼',
        'submit': '登入',
        'submitting': '登入中...',
        'back_home': '返回首頁',
        'login_failed': '登入失敗，請稍後再試',
        'not_admin': '此帳號無管理員權限',
        'dashboard_title': '管理後台',
        'logout': '登出',
        'search': '搜尋使用者',
        'amount': '金額',
        'all_amounts': '全部',
        'date_from': '開始時間',
        'date_to': '結束時間',
        'filter': '篩選',
        'total': '共',
        'no_entries': '沒有紀錄',
        'delete': '刪除',
        'clear_all': '清除全部紀錄',
        'clear_confirm': '確定要清除全部紀錄嗎？',
        'deleted': '已刪除紀錄',
        'cleared': '已清除全部紀錄',
        'username': '使用者',
        'timestamp': '時間',
        'image': '圖片',
        'prize': '獎金',
        'previous': '上一頁',
        'next': '下一頁',
    },
    'en': {
        'site_title': 'Lucky Ledger',
        'today_count': 'Entries today',
        'admin_link': 'Admin sign in',
        'login_title': 'Admin sign in',
        'login_subtitle': 'Enter the admin email and password',
        'email_label': 'Admin email',
        'password_label': 'Admin password',
        'password_placeholder': 'Enter password',
        'submit': 'Sign in',
        'submitting': 'Signing in...',
        'back_home': 'Back to home',
        'login_failed': 'Login failed, please try again later',
        'not_admin': 'This account has no admin privileges',
        'dashboard_title': 'Dashboard',
        'logout': 'Sign out',
        'search': 'Search user',
        'amount': 'Amount',
        'all_amounts': 'All',
        'date_from': 'From',
        'date_to': 'To',
        'filter': 'Filter',
        'total': 'Total',
        'no_entries': 'No entries',
        'delete': 'Delete',
        'clear_all': 'Clear all entries',
        'clear_confirm': 'Really clear every entry?',
        'deleted': 'Entry deleted',
        'cleared': 'All entries cleared',
        'username': 'User',
        'timestamp': 'Time',
        'image': 'Image',
        'prize': 'Prize',
        'previous': 'Previous',
        'next': 'Next',
    },
}


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _parse_date(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        parse_timestamp(value)
    except InvalidEntry:
        return None
    return value


def _get_lang(request) -> str:
    requested = request.GET.get('lang')
    if requested in SUPPORTED_LANGS:
        normalized = 'en' if requested == 'en' else 'zh'
        request.session['lang'] = normalized

    lang = request.session.get('lang', 'zh')
    language_code = 'en' if lang == 'en' else 'zh-hant'
    translation.activate(language_code)
    request.LANGUAGE_CODE = language_code
    return lang


def _page_params(request) -> dict:
    config = settings.ENTRIES_CONFIG
    page_size = _parse_int(request.GET.get('page_size'), config['DEFAULT_PAGE_SIZE'])
    if page_size <= 0:
        page_size = config['DEFAULT_PAGE_SIZE']
    return {
        'page': min(_parse_int(request.GET.get('page'), 1), config['MAX_PAGE']),
        'page_size': min(page_size, config['MAX_PAGE_SIZE']),
        'search': request.GET.get('search', '').strip(),
        'amount': request.GET.get('amount') or 'all',
        'date_from': _parse_date(request.GET.get('date_from')),
        'date_to': _parse_date(request.GET.get('date_to')),
    }


def admin_required(view_func=None, *, api: bool = False):
    def decorator(func):
        @wraps(func)
        def wrapper(request, *args, **kwargs):
            if not check_existing_session(request):
                if api:
                    return JsonResponse({'error': 'Forbidden'}, status=403)
                return redirect('admin_login')
            return func(request, *args, **kwargs)

        return wrapper

    if view_func is not None:
        return decorator(view_func)
    return decorator


def _store_error(exc: Exception) -> JsonResponse:
    return JsonResponse({'error': str(exc)}, status=500)


def home(request):
    lang = _get_lang(request)
    context = {
        'today_count': get_today_count(),
        'lang': lang,
        't': TEXTS[lang],
    }
    return render(request, 'entries/home.html', context)


@require_http_methods(['GET', 'POST'])
def admin_login(request):
    lang = _get_lang(request)
    texts = TEXTS[lang]
    error = ''

    if request.method == 'GET':
        if check_existing_session(request):
            return redirect('dashboard')
        form = AdminLoginForm()
    else:
        form = AdminLoginForm(request.POST)
        if form.is_valid():
            result = authenticate_and_authorize(
                request,
                form.cleaned_data['email'],
                form.cleaned_data['password'],
            )
            if isinstance(result, Authorized):
                return redirect('dashboard')
            if isinstance(result, Unauthorized):
                error = texts['not_admin']
            elif isinstance(result, AuthFailed):
                error = result.reason or texts['login_failed']
        else:
            error = texts['login_failed']

    context = {
        'form': form,
        'error': error,
        'lang': lang,
        't': texts,
    }
    return render(request, 'entries/login.html', context)


@require_POST
def admin_logout(request):
    logout(request)
    return redirect('admin_login')


@admin_required
def dashboard(request):
    lang = _get_lang(request)
    params = _page_params(request)
    page = get_entries_paged(**params)
    total_pages = max(1, math.ceil(page.total / params['page_size']))
    current_page = max(params['page'], 1)

    filters = {
        key: value
        for key, value in params.items()
        if key != 'page' and value not in (None, '', 'all')
    }
    context = {
        'entries': page.data,
        'total': page.total,
        'page': current_page,
        'total_pages': total_pages,
        'has_previous': current_page > 1,
        'has_next': current_page < total_pages,
        'filters': params,
        'query': urlencode(filters),
        'amounts': get_amounts(),
        'today_count': get_today_count(),
        'lang': lang,
        't': TEXTS[lang],
    }
    return render(request, 'entries/dashboard.html', context)


@require_POST
@admin_required
def dashboard_delete_entry(request, entry_id: str):
    lang = _get_lang(request)
    delete_entry(entry_id)
    messages.success(request, TEXTS[lang]['deleted'])
    return redirect('dashboard')


@require_POST
@admin_required
def dashboard_clear_entries(request):
    lang = _get_lang(request)
    clear_all_entries()
    messages.success(request, TEXTS[lang]['cleared'])
    return redirect('dashboard')


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def api_entries(request):
    if request.method == 'POST':
        return _create_entry(request)

    if not check_existing_session(request):
        return JsonResponse({'error': 'Forbidden'}, status=403)
    params = _page_params(request)
    try:
        page = get_entries_paged(**params)
    except DatabaseError as exc:
        return _store_error(exc)
    return JsonResponse({
        'data': [entry.to_dict() for entry in page.data],
        'total': page.total,
        'page': params['page'],
        'page_size': params['page_size'],
    })


def _create_entry(request) -> JsonResponse:
    try:
        payload = json.loads(request.body or b'{}')
    except (TypeError, ValueError):
        return JsonResponse({'error': 'Invalid JSON body'}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({'error': 'Expected a JSON object'}, status=400)

    try:
        created = save_entry(payload)
    except InvalidEntry as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    except DatabaseError as exc:
        return _store_error(exc)
    return JsonResponse({'data': [entry.to_dict() for entry in created]}, status=201)


@require_http_methods(['GET'])
@admin_required(api=True)
def api_entries_all(request):
    try:
        entries = get_entries()
    except DatabaseError as exc:
        return _store_error(exc)
    return JsonResponse({'data': [entry.to_dict() for entry in entries]})


@require_POST
@admin_required(api=True)
def api_delete_entry(request, entry_id: str):
    try:
        success = delete_entry(entry_id)
    except DatabaseError as exc:
        return _store_error(exc)
    return JsonResponse({'success': success})


@require_POST
@admin_required(api=True)
def api_clear_entries(request):
    try:
        success = clear_all_entries()
    except DatabaseError as exc:
        return _store_error(exc)
    return JsonResponse({'success': success})


@require_http_methods(['GET'])
@admin_required(api=True)
def api_today_entries(request):
    try:
        entries = get_today_entries()
    except DatabaseError as exc:
        return _store_error(exc)
    return JsonResponse({'data': [entry.to_dict() for entry in entries]})


@require_http_methods(['GET'])
def api_today_count(request):
    return JsonResponse({'count': get_today_count()})
