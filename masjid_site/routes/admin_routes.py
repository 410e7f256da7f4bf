# masjid_site/routes/admin_routes.py

from functools import wraps

from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app, session, g, abort

from ..extensions import limiter
from ..forms import LoginForm, SiteConfigForm, CREATE_FORMS, UPDATE_FORMS, form_fields
from ..services.admin_sync import KIND_LABELS, SITE_KIND
from ..services.content_api import ContentApiError
from ..services.site_runtime import get_runtime
from ..utils.constants import COLLECTION_KINDS

admin_bp = Blueprint('admin', __name__)

SESSION_KEY = 'admin_key'


def admin_required(f):
    """Resolves the signed-in admin's controller into g.admin, or sends them to the login page."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        controller = get_runtime().controller_for(session.get(SESSION_KEY))
        if controller is None:
            session.pop(SESSION_KEY, None)
            flash('Please log in to continue.', 'info')
            return redirect(url_for('admin.login'))
        g.admin = controller
        return f(*args, **kwargs)
    return decorated_function


def _check_kind(kind):
    if kind not in COLLECTION_KINDS:
        abort(404)
    # Users pages do not exist for admins below super admin.
    if kind == 'users' and not g.admin.session.is_super_admin:
        abort(404)


def _post_invalid(form):
    g.admin.notices.post(f"Invalid input: {', '.join(sorted(form.errors))}")


def _back_to(tab):
    return redirect(url_for('admin.dashboard', tab=tab))


@admin_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit(lambda: current_app.config.get('ADMIN_LOGIN_RATE_LIMIT', '10 per minute'))
def login():
    if get_runtime().controller_for(session.get(SESSION_KEY)) is not None:
        return redirect(url_for('admin.dashboard'))

    form = LoginForm()
    if form.validate_on_submit():
        try:
            key, _ = get_runtime().login(form.email.data.strip().lower(), form.password.data)
        except ContentApiError as e:
            current_app.logger.info(f"Admin login failed for '{form.email.data}': {e.message}")
            flash(e.message, 'danger')
        else:
            session.permanent = True
            session[SESSION_KEY] = key
            return redirect(url_for('admin.dashboard'))

    return render_template('admin/login.html', title='Admin Log In', form=form)


@admin_bp.route('/logout')
def logout():
    get_runtime().logout(session.pop(SESSION_KEY, None))
    flash('You have been logged out.', 'info')
    return redirect(url_for('admin.login'))


@admin_bp.route('/')
@admin_required
def dashboard():
    controller = g.admin
    runtime = get_runtime()
    tabs = [SITE_KIND] + [k for k in COLLECTION_KINDS if k != 'users' or controller.session.is_super_admin]
    tab = request.args.get('tab', SITE_KIND)
    if tab not in tabs:
        tab = SITE_KIND

    context = {
        'title': 'Admin',
        'tabs': tabs,
        'tab': tab,
        'labels': KIND_LABELS,
        'user': controller.session.user,
        'notice': controller.notices.current(),
        'now': runtime.time_source.now(),
    }
    if tab == SITE_KIND:
        context['form'] = SiteConfigForm(data=runtime.store.site_config)
        context['site_state'] = runtime.store.site_state
    else:
        context['form'] = CREATE_FORMS[tab]()
        context['rows'] = runtime.store.collection(tab)
    return render_template('admin/dashboard.html', **context)


@admin_bp.route('/reload', methods=['POST'])
@admin_required
def reload():
    g.admin.reload_all()
    return _back_to(request.args.get('tab', SITE_KIND))


@admin_bp.route('/users/refresh', methods=['POST'])
@admin_required
def refresh_users():
    _check_kind('users')
    g.admin.refresh_users()
    return _back_to('users')


@admin_bp.route('/notice/dismiss', methods=['POST'])
@admin_required
def dismiss_notice():
    g.admin.notices.dismiss()
    return _back_to(request.args.get('tab', SITE_KIND))


@admin_bp.route('/site', methods=['POST'])
@admin_required
def save_site():
    form = SiteConfigForm()
    if form.validate_on_submit():
        g.admin.save_site_patch(form_fields(form))
    else:
        _post_invalid(form)
    return _back_to(SITE_KIND)


@admin_bp.route('/<kind>/new', methods=['POST'])
@admin_required
def create_row(kind):
    _check_kind(kind)
    form = CREATE_FORMS[kind]()
    if form.validate_on_submit():
        g.admin.create(kind, form_fields(form))
    else:
        _post_invalid(form)
    return _back_to(kind)


@admin_bp.route('/<kind>/<record_id>/edit', methods=['GET', 'POST'])
@admin_required
def edit_row(kind, record_id):
    _check_kind(kind)
    if request.method == 'GET':
        row = get_runtime().store.find(kind, record_id)
        if row is None:
            abort(404)
        form = UPDATE_FORMS[kind](data=row)
    else:
        form = UPDATE_FORMS[kind]()
        if form.validate_on_submit():
            if g.admin.update(kind, record_id, form_fields(form)).applied:
                return _back_to(kind)
        else:
            _post_invalid(form)
    return render_template('admin/edit.html',
                           title=f"Edit {KIND_LABELS[kind]}",
                           kind=kind,
                           record_id=record_id,
                           labels=KIND_LABELS,
                           form=form,
                           notice=g.admin.notices.current(),
                           now=get_runtime().time_source.now())


@admin_bp.route('/<kind>/<record_id>/delete', methods=['POST'])
@admin_required
def delete_row(kind, record_id):
    _check_kind(kind)
    g.admin.delete(kind, record_id)
    return _back_to(kind)
