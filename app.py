"""
КӨПҮРӨ — Flask Application
Приём и отслеживание обращений граждан, портал сотрудников
"""
import os
from datetime import datetime
from flask import Flask, render_template, request, jsonify, session, redirect, url_for, g, flash
from flask_session import Session
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from config import Config
from data.statuses import SUBMISSION_TYPES
from services.access import Area, AccessAction, check_access, MSG_NOT_ACTIVE
from services.admin_service import AdminService
from services.auth_service import AuthSession, register_worker
from services.backend_client import backend_client
from services.errors import BackendError, InputError, GENERIC_ERROR, format_field_errors
from services.issue_service import IssueService, MSG_NOT_FOUND
from services.stats_service import load_dashboard_stats

# Создаём приложение
app = Flask(__name__)
app.config.from_object(Config)

# Инициализируем сессии (файловая система)
os.makedirs(Config.SESSION_FILE_DIR, exist_ok=True)
Session(app)

# Rate limiting
limiter = Limiter(
    key_func=get_remote_address,
    app=app,
    default_limits=[Config.RATELIMIT_DEFAULT]
)

issue_service = IssueService(backend_client)
admin_service = AdminService(backend_client)


# ==================== AUTH ====================

@app.before_request
def load_auth():
    """Поднимаем сессию сотрудника на каждый запрос"""
    if request.endpoint == 'static':
        return None

    g.auth = AuthSession(session, backend_client, request.path)
    g.auth.start()

    # fetch_user мог разлогинить по 401/403
    if g.auth.redirect_to:
        return redirect(g.auth.redirect_to)
    return None


@app.context_processor
def inject_globals():
    auth = g.get('auth')
    return {
        "current_user": auth.user if auth else None,
        "theme": session.get(Config.THEME_KEY, "light"),
        "current_year": datetime.now().year
    }


@app.template_filter('ru_datetime')
def ru_datetime(value):
    if not value:
        return ""
    return value.strftime("%d.%m.%Y %H:%M:%S")


def gate(area: Area):
    """Проверка доступа к странице; None, если можно рендерить"""
    auth = g.auth
    decision = check_access(area, auth.user, auth.is_authenticated, auth.is_loading)

    if decision.action is AccessAction.WAIT:
        return render_template('initializing.html')
    if decision.action is AccessAction.LOGOUT:
        auth.logout()
        return redirect(decision.location)
    if decision.action is AccessAction.REDIRECT:
        return redirect(decision.location)
    return None


# ==================== PUBLIC ROUTES ====================

@app.route('/')
def index():
    """Главная страница для граждан"""
    return render_template('index.html')


@app.route('/submit-complaint', methods=['GET', 'POST'])
@limiter.limit(Config.RATELIMIT_SUBMIT, methods=['POST'])
def submit_complaint():
    """Подача обращения"""
    form = {
        "text": "",
        "submission_type": "жалоба",
        "source_user_id": "",
        "source_username": "",
        "user_first_name": ""
    }
    error = None
    success = None

    if request.method == 'POST':
        for key in form:
            form[key] = request.form.get(key, form[key])

        try:
            success = issue_service.submit(
                text=form["text"],
                submission_type=form["submission_type"],
                source_user_id=form["source_user_id"],
                source_username=form["source_username"],
                user_first_name=form["user_first_name"]
            )
            # Контакты оставляем для следующих обращений
            form["text"] = ""
        except InputError as e:
            error = e.message
        except BackendError as e:
            error = e.message or 'Произошла ошибка при отправке обращения.'

    return render_template(
        'submit_complaint.html',
        form=form,
        error=error,
        success=success,
        submission_types=SUBMISSION_TYPES
    )


def _render_track(contact: str, searched: bool, feedback_errors=None, feedback_text=None,
                  notice=None, sent_feedback=None):
    issues = []
    error = None

    if searched:
        try:
            issues = issue_service.track(contact, sent_feedback)
            if not issues:
                error = MSG_NOT_FOUND
        except InputError as e:
            error = e.message
        except BackendError as e:
            error = e.message or 'Произошла ошибка при получении данных.'

    return render_template(
        'track_complaint.html',
        contact=contact,
        searched=searched,
        issues=issues,
        error=error,
        notice=notice,
        feedback_errors=feedback_errors or {},
        feedback_text=feedback_text or {}
    )


@app.route('/track-complaint', methods=['GET', 'POST'])
def track_complaint():
    """Отслеживание обращений по контакту"""
    if request.method == 'POST':
        contact = request.form.get('source_user_id', '')
        return _render_track(contact, searched=True)

    # Ссылка вида /track-complaint?source_user_id=... сразу запускает поиск
    contact = request.args.get('source_user_id')
    notice = None
    sent_feedback = session.pop(Config.SENT_FEEDBACK_KEY, None)
    if sent_feedback:
        notice = 'Спасибо! Ваш отзыв сохранён.'
    return _render_track(contact or '', searched=contact is not None, notice=notice,
                         sent_feedback=sent_feedback)


@app.route('/track-complaint/<int:issue_id>/feedback', methods=['POST'])
@limiter.limit(Config.RATELIMIT_SUBMIT)
def submit_feedback(issue_id):
    """Отзыв гражданина о решении"""
    contact = request.form.get('source_user_id', '')
    text = request.form.get('feedback', '')

    try:
        result = issue_service.submit_feedback(issue_id, text, request.form.get('status', ''))
    except InputError as e:
        return _render_track(contact, True, {issue_id: e.message}, {issue_id: text})
    except BackendError as e:
        message = e.message or 'Не удалось отправить отзыв.'
        return _render_track(contact, True, {issue_id: message}, {issue_id: text})

    # Отзыв и новый статус показываем сразу, не дожидаясь backend
    session[Config.SENT_FEEDBACK_KEY] = result
    return redirect(url_for('track_complaint', source_user_id=contact.strip()))


# ==================== EMPLOYEE PORTAL ====================

@app.route('/portal')
def portal():
    """Портал для сотрудников"""
    blocked = gate(Area.GUEST)
    if blocked:
        return blocked
    return render_template('portal.html')


@app.route('/login', methods=['GET', 'POST'])
@limiter.limit(Config.RATELIMIT_LOGIN, methods=['POST'])
def login():
    blocked = gate(Area.GUEST)
    if blocked:
        return blocked

    error = None
    email = ''

    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')

        try:
            token = backend_client.login_for_token(email, password)
        except BackendError as e:
            if e.detail:
                error = e.message
            else:
                error = 'Login failed. Please check your credentials or network connection.'
        else:
            target = g.auth.login(token)
            if target:
                return redirect(target)
            if g.auth.login_denied:
                error = MSG_NOT_ACTIVE
            else:
                error = 'Signed in, but your profile could not be loaded. Please try again.'

    return render_template(
        'login.html',
        email=email,
        error=error,
        message=request.args.get('message')
    )


@app.route('/register', methods=['GET', 'POST'])
@limiter.limit(Config.RATELIMIT_SUBMIT, methods=['POST'])
def register():
    form = {"email": "", "full_name": ""}
    error = None
    success = None

    if request.method == 'POST':
        form["email"] = request.form.get('email', '')
        form["full_name"] = request.form.get('full_name', '')

        try:
            register_worker(
                backend_client,
                email=form["email"],
                password=request.form.get('password', ''),
                confirm_password=request.form.get('confirm_password', ''),
                full_name=form["full_name"]
            )
            success = ('Registration successful! Your account has been created. '
                       'Please wait for an administrator to confirm your account before you can log in.')
            form = {"email": "", "full_name": ""}
        except InputError as e:
            error = e.message
        except BackendError as e:
            if e.detail:
                error = format_field_errors(e.detail)
            else:
                error = 'Registration failed. An unexpected error occurred. Please try again.'

    return render_template('register.html', form=form, error=error, success=success)


@app.route('/logout', methods=['POST'])
def logout():
    target = g.auth.logout()
    return redirect(target or url_for('index'))


@app.route('/dashboard')
def dashboard():
    blocked = gate(Area.DASHBOARD)
    if blocked:
        return blocked

    stats = load_dashboard_stats(backend_client, g.auth.token)
    if stats.get("status_code") in (401, 403):
        return redirect(g.auth.logout() or url_for('login'))

    return render_template('dashboard.html', user=g.auth.user, stats=stats)


@app.route('/api/dashboard/stats')
def dashboard_stats():
    """Статистика для обновления дашборда без перезагрузки"""
    auth = g.auth
    decision = check_access(Area.DASHBOARD, auth.user, auth.is_authenticated, auth.is_loading)
    if not decision.allowed:
        return jsonify({"error": "Unauthorized"}), 401

    stats = load_dashboard_stats(backend_client, auth.token)
    if stats.get("status_code") in (401, 403):
        auth.logout()
        return jsonify({"error": "Unauthorized"}), 401
    if stats.get("error"):
        return jsonify({"error": stats["error"]}), 502
    return jsonify({
        "overall": stats["overall"],
        "timeline": stats["timeline"],
        "top_addresses": stats["top_addresses"]
    })


@app.route('/admin')
def admin():
    blocked = gate(Area.ADMIN)
    if blocked:
        return blocked

    data = {"users": [], "unconfirmed_workers": []}
    page_error = None
    try:
        data = admin_service.load(g.auth.token)
    except BackendError as e:
        print(f"AdminPage: Failed to fetch admin data: {e.status_code} {e.message}")
        if e.is_auth_failure:
            return redirect(g.auth.logout() or url_for('login'))
        page_error = e.message or 'Could not load admin data. Please try again.'

    return render_template(
        'admin.html',
        user=g.auth.user,
        users=data["users"],
        unconfirmed_workers=data["unconfirmed_workers"],
        page_error=page_error
    )


@app.route('/admin/confirm-worker/<int:user_id>', methods=['POST'])
@limiter.limit(Config.RATELIMIT_SUBMIT)
def confirm_worker(user_id):
    blocked = gate(Area.ADMIN)
    if blocked:
        return blocked

    try:
        admin_service.confirm(g.auth.token, user_id)
        flash(f"Worker {user_id} confirmed successfully!", "success")
    except BackendError as e:
        if e.is_auth_failure:
            return redirect(g.auth.logout() or url_for('login'))
        flash(e.message or f"Failed to confirm worker {user_id}.", "error")

    return redirect(url_for('admin'))


@app.route('/theme/toggle', methods=['POST'])
def toggle_theme():
    """Переключение светлой/тёмной темы"""
    current = session.get(Config.THEME_KEY, "light")
    session[Config.THEME_KEY] = "light" if current == "dark" else "dark"

    next_url = request.form.get('next', '/')
    if not next_url.startswith('/') or next_url.startswith('//'):
        next_url = '/'
    return redirect(next_url)


# ==================== ERROR HANDLERS ====================

@app.errorhandler(429)
def ratelimit_error(e):
    message = "Слишком много запросов. Подождите немного и попробуйте снова."
    if request.path.startswith('/api/'):
        return jsonify({"error": message}), 429
    return render_template('error.html', message=message), 429


@app.errorhandler(500)
def internal_error(e):
    message = GENERIC_ERROR
    if request.path.startswith('/api/'):
        return jsonify({"error": message}), 500
    return render_template('error.html', message=message), 500


# ==================== MAIN ====================

if __name__ == '__main__':
    os.makedirs(Config.SESSION_FILE_DIR, exist_ok=True)

    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_DEBUG') == '1')
