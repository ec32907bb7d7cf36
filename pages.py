# pages.py - inline Jinja templates, served to Flask through a DictLoader

BASE = """<!doctype html><html><head>
<meta name=viewport content="width=device-width, initial-scale=1">
<link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css">
<title>{% block title %}SelamBus{% endblock %} | SelamBus</title>
</head><body class="bg-light">
<nav class="navbar navbar-expand-lg navbar-dark bg-primary"><div class="container"><a class="navbar-brand" href="/">SelamBus</a>
<div class="d-flex">
  <a class="btn btn-sm btn-outline-light me-2" href="/contact">Contact</a>
  {% if current_user.is_authenticated %}
    <a class="btn btn-sm btn-outline-light me-2" href="/profile">{{ current_user.name }}</a>
    {% if current_user.role == 'admin' %}<a class="btn btn-sm btn-warning me-2" href="/admin">Admin</a>{% endif %}
    <a class="btn btn-sm btn-danger" href="/logout">Logout</a>
  {% else %}
    <a class="btn btn-sm btn-outline-light me-2" href="/login">Login</a>
    <a class="btn btn-sm btn-light" href="/register">Register</a>
  {% endif %}
</div></div></nav>
<main class="container py-4">
{% with messages = get_flashed_messages(with_categories=true) %}
  {% for c,m in messages %}<div class="alert alert-{{c}}">{{m}}</div>{% endfor %}
{% endwith %}
{% block content %}{% endblock %}
</main>
{% block scripts %}{% endblock %}
</body></html>"""

SEARCH_FORM = """<form method=post action='/' class='row g-2 align-items-end'>
  <div class='col-md-3'><label class='form-label'>From</label>
    <input class='form-control' name=from list=cities value='{{ criteria.from_city }}' placeholder='Departure city'></div>
  <div class='col-md-3'><label class='form-label'>To</label>
    <input class='form-control' name=to list=cities value='{{ criteria.to_city }}' placeholder='Destination city'></div>
  <div class='col-md-2'><label class='form-label'>Departure</label>
    <input class='form-control' type=date name=departureDate min='{{ today }}' value='{{ criteria.departure_date }}'></div>
  <div class='col-md-2'><label class='form-label'>Return</label>
    <input class='form-control' type=date name=returnDate min='{{ today }}' value='{{ criteria.return_date }}'></div>
  <div class='col-md-2'>
    <div class='form-check'><input class='form-check-input' type=checkbox name=isRoundTrip value=1 id=rt {% if criteria.is_round_trip %}checked{% endif %}>
    <label class='form-check-label' for=rt>Round trip</label></div>
    <button class='btn btn-primary w-100'>Search Buses</button></div>
  <datalist id=cities>{% for c in cities %}<option value='{{ c }}'>{% endfor %}</datalist>
</form>"""

PAGER = """{% if page.total_pages > 1 %}<nav><ul class='pagination'>
{% for p in page.pages %}<li class='page-item {% if p == page.page %}active{% endif %}'>
<a class='page-link' href='{{ url_for(request.endpoint, **dict(request.args.to_dict(), page=p)) }}'>{{ p }}</a></li>{% endfor %}
</ul></nav>{% endif %}
<p class='text-muted small'>{{ page.total_items }} records</p>"""

ADMIN_NAV = """<div class='mb-3'>
  <a class='btn btn-sm btn-primary' href='/admin'>Dashboard</a>
  <a class='btn btn-sm btn-secondary' href='/admin/bookings'>Bookings</a>
  <a class='btn btn-sm btn-secondary' href='/admin/buses'>Buses</a>
  <a class='btn btn-sm btn-secondary' href='/admin/users'>Users</a>
  <a class='btn btn-sm btn-outline-dark' href='/admin/settings'>Settings</a>
  <form class='d-inline-flex ms-2' action='/admin/search'><input class='form-control form-control-sm me-1' name=q placeholder='Search everything' value='{{ q or '' }}'><button class='btn btn-sm btn-outline-primary'>Go</button></form>
</div>"""

TPLS = {
"index.html": """{% extends 'base.html' %}{% block title %}Book Bus Tickets{% endblock %}{% block content %}
<div class='p-4 mb-4 bg-white rounded shadow-sm'>
<h2>Travel across Ethiopia</h2>
<p class='text-muted'>Compare buses, pick your seat and pay with TeleBirr, CBE Birr, card or bank transfer.</p>
{% include '_search_form.html' %}
</div>
{% endblock %}""",

"_search_form.html": SEARCH_FORM,
"_pager.html": PAGER,
"_admin_nav.html": ADMIN_NAV,

"results.html": """{% extends 'base.html' %}{% block title %}Search Results{% endblock %}{% block content %}
<div class='d-flex justify-content-between align-items-center mb-3'>
  <h4 class='mb-0'>{{ search_data.get('from') or 'Addis Ababa' }} &rarr; {{ search_data.get('to') or 'Hawassa' }}
  <small class='text-muted'>{{ search_data.get('departureDate', '') }}</small></h4>
  <details><summary class='btn btn-sm btn-outline-primary'>Modify Search</summary>
    {% set criteria = {'from_city': search_data.get('from', ''), 'to_city': search_data.get('to', ''), 'departure_date': search_data.get('departureDate', ''), 'return_date': search_data.get('returnDate', ''), 'is_round_trip': search_data.get('isRoundTrip')} %}
    <div class='card p-3 mt-2'>{% include '_search_form.html' %}</div>
  </details>
</div>
<div class='row'>
<div class='col-md-3'>
<form class='card p-3' method=get>
  <h6>Departure time</h6>
  {% for t in ['morning','afternoon','evening','night'] %}
  <label class='form-check'><input class='form-check-input' type=checkbox name=time value='{{t}}' {% if t in filters.time %}checked{% endif %}> {{ t|capitalize }}</label>
  {% endfor %}
  <h6 class='mt-2'>Bus type</h6>
  {% for t in ['economy','business','luxury'] %}
  <label class='form-check'><input class='form-check-input' type=checkbox name=busType value='{{t}}' {% if t in filters.bus_type %}checked{% endif %}> {{ t|capitalize }}</label>
  {% endfor %}
  <h6 class='mt-2'>Company</h6>
  {% for c in companies %}{% set slug = company_slug(c) %}
  <label class='form-check'><input class='form-check-input' type=checkbox name=company value='{{slug}}' {% if slug in filters.company %}checked{% endif %}> {{ c }}</label>
  {% endfor %}
  <h6 class='mt-2'>Amenities</h6>
  {% for a, label in [('wifi','WiFi'),('ac','AC'),('toilet','Toilet'),('charging','Charging'),('snack','Snack')] %}
  <label class='form-check'><input class='form-check-input' type=checkbox name=amenity value='{{a}}' {% if a in filters.amenities %}checked{% endif %}> {{ label }}</label>
  {% endfor %}
  <h6 class='mt-2'>Max price: ETB {{ filters.price_max }}</h6>
  <input type=range class='form-range' name=priceMax min=100 max=500 step=10 value='{{ filters.price_max }}'>
  <h6 class='mt-2'>Sort by</h6>
  <select class='form-select mb-2' name=sort>
  {% for key, label in [('departure','Departure time'),('price-low','Price: low to high'),('price-high','Price: high to low'),('rating','Rating'),('duration','Duration')] %}
    <option value='{{key}}' {% if manager.current_sort == key %}selected{% endif %}>{{ label }}</option>
  {% endfor %}
  </select>
  <button class='btn btn-primary w-100'>Apply</button>
  <a class='btn btn-link w-100' href='/search'>Clear all filters</a>
</form>
</div>
<div class='col-md-9'>
<p class='text-muted'>{{ manager.result_count }} buses found</p>
{% for bus in manager.visible_results %}
<div class='card mb-3'><div class='card-body d-flex justify-content-between'>
  <div>
    <span class='badge' style='background:#{{ bus.color }}'>{{ bus.logo }}</span>
    <b>{{ bus.company }}</b> <small class='text-muted'>{{ bus.busType }}</small><br>
    {% set full, half, empty = star_rating(bus.rating) %}
    <span class='text-warning'>{{ '&#9733;'|safe * full }}{% if half %}&#189;{% endif %}</span><span class='text-secondary'>{{ '&#9734;'|safe * empty }}</span> {{ bus.rating }}<br>
    {{ bus.departureTime }} {{ bus.departureTerminal }} &rarr; {{ bus.arrivalTime }} {{ bus.arrivalTerminal }}
    <small class='text-muted'>({{ format_duration(bus.duration) }})</small><br>
    <small>{% for a in bus.amenities %}<span class='badge bg-light text-dark me-1'>{{ a.name }}</span>{% endfor %}</small>
  </div>
  <div class='text-end'>
    <h5>ETB {{ bus.price }}</h5>
    <small class='text-muted'>{{ bus.seatsAvailable }} seats left</small>
    <form method=post action='/search/select/{{ bus.id }}'><button class='btn btn-success mt-2'>Select Seats</button></form>
  </div>
</div></div>
{% else %}
<div class='alert alert-info'>No buses match your filters. <a href='/search'>Clear all filters</a></div>
{% endfor %}
{% if more_url %}<a class='btn btn-outline-primary w-100' href='{{ more_url }}'>Load more results</a>{% endif %}
</div>
</div>
{% endblock %}""",

"seats.html": """{% extends 'base.html' %}{% block title %}Select Seats{% endblock %}{% block content %}
<h3>Select your seats</h3>
{% if bus %}<p class='text-muted'>{{ bus.company }} &middot; {{ bus.busType }} &middot; {{ bus.departureTime }} &rarr; {{ bus.arrivalTime }}</p>{% endif %}
<form method=post>
<div class='row'>
<div class='col-md-5'>
  <div class='input-group mb-3'>
    <select class='form-select' name=busType>
    {% for t in layouts %}<option value='{{t}}' {% if t == manager.bus_type %}selected{% endif %}>{{ t|capitalize }} (ETB {{ prices[t] }})</option>{% endfor %}
    </select>
    <button class='btn btn-outline-secondary' name=switch value=1>Change class</button>
  </div>
  <div class='card p-3'>
  {% for row in manager.rows() %}<div class='d-flex mb-1'>
    {% for cell in row %}
      {% if cell is none %}<div style='width:2.5rem'></div>
      {% else %}
      {% set cls = {'available':'btn-outline-secondary','selected':'btn-success','booked':'btn-secondary','womenOnly':'btn-outline-danger'}[cell.state.value] %}
      <button class='btn btn-sm {{cls}} me-1' style='width:3rem' name=toggle value='{{ cell.seat_id }}' title='{{ cell.state.value }}' {% if not cell.clickable %}disabled{% endif %}>{{ cell.seat_id }}</button>
      {% endif %}
    {% endfor %}
  </div>{% endfor %}
  <small class='text-muted mt-2'>Outlined red seats are reserved for women. Grey seats are taken.</small>
  </div>
</div>
<div class='col-md-7'>
  <div class='card p-3 mb-3'>
    <p class='mb-1'>Selected: <b>{{ manager.selected_seats|join(', ') or 'none' }}</b> ({{ manager.selected_seats|length }}/{{ manager.max_seats }})</p>
    <p class='mb-1'>Total: <b>ETB {{ manager.total_price }}</b></p>
    <small class='text-muted'>Status: {{ manager.state().value|replace('_', ' ') }}</small>
  </div>
  {% for seat in manager.selected_seats %}
  <div class='card p-3 mb-2'>
    <h6>Passenger for seat {{ seat }}</h6>
    <div class='row g-2'>
      <div class='col-md-6'><input class='form-control' name='passenger_{{seat}}_name' placeholder='Full name' value='{{ manager.form_value(seat, "name") }}'></div>
      <div class='col-md-2'><input class='form-control' name='passenger_{{seat}}_age' placeholder='Age' value='{{ manager.form_value(seat, "age") }}'></div>
      <div class='col-md-4'><select class='form-select' name='passenger_{{seat}}_gender'>
        <option value=''>Gender</option>
        {% for g in ['male','female'] %}<option value='{{g}}' {% if manager.form_value(seat, 'gender') == g %}selected{% endif %}>{{ g|capitalize }}</option>{% endfor %}
      </select></div>
      <div class='col-md-6'><input class='form-control' name='passenger_{{seat}}_phone' placeholder='Phone (+251...)' value='{{ manager.form_value(seat, "phone") }}'></div>
      <div class='col-md-6'><input class='form-control' name='passenger_{{seat}}_email' placeholder='Email (optional)' value='{{ manager.form_value(seat, "email") }}'></div>
      <div class='col-md-6'><input class='form-control' name='passenger_{{seat}}_id' placeholder='ID number (optional)' value='{{ manager.form_value(seat, "id") }}'></div>
      <div class='col-md-6'><label class='form-check'><input class='form-check-input' type=checkbox name='passenger_{{seat}}_special' value=1 {% if manager.form_value(seat, 'special') %}checked{% endif %}> Special requirements</label></div>
      <div class='col-12'><input class='form-control' name='passenger_{{seat}}_requirements' placeholder='Describe requirements' value='{{ manager.form_value(seat, "requirements") }}'></div>
    </div>
  </div>
  {% endfor %}
  <button class='btn btn-outline-danger' name=clear value=1>Clear all</button>
  <button class='btn btn-primary' name=proceed value=1>Continue to payment</button>
</div>
</div>
</form>
{% endblock %}""",

"payment.html": """{% extends 'base.html' %}{% block title %}Payment{% endblock %}{% block content %}
<h3>Payment <small class='text-muted'>{{ reference }}</small></h3>
<div class='row'>
<div class='col-md-7'>
<ul class='nav nav-tabs mb-3'>
{% for m in methods %}<li class='nav-item'><a class='nav-link {% if m == method %}active{% endif %}' href='/payment?method={{m}}'>{{ method_labels[m] }}</a></li>{% endfor %}
</ul>
<form method=post enctype='multipart/form-data' class='card p-3'>
<input type=hidden name=paymentMethod value='{{ method }}'>
{% macro field(name, label, type='text') %}
  <label class='form-label'>{{ label }}</label>
  <input class='form-control {% if errors.get(name) %}is-invalid{% endif %}' type='{{ type }}' name='{{ name }}' value='{{ request.form.get(name, '') if type != 'password' else '' }}'>
  {% if errors.get(name) %}<div class='invalid-feedback'>{{ errors[name] }}</div>{% endif %}
{% endmacro %}
{% if method == 'telebirr' %}
  {{ field('telebirrNumber', 'TeleBirr phone number') }}{{ field('telebirrPin', 'PIN', 'password') }}
{% elif method == 'cbebirr' %}
  {{ field('cbeNumber', 'CBE Birr phone number') }}{{ field('cbePin', 'PIN', 'password') }}
{% elif method == 'card' %}
  {{ field('cardNumber', 'Card number') }}{{ field('expiryDate', 'Expiry (MM/YY)') }}{{ field('cvv', 'CVV', 'password') }}{{ field('cardholderName', 'Cardholder name') }}
  <small class='text-muted'>A card processing fee of ETB {{ card_fee }} applies.</small>
{% else %}
  <p>Transfer ETB {{ pricing.total }} to SelamBus, Commercial Bank of Ethiopia, then upload the receipt (JPG, PNG or PDF, max 5MB).</p>
  <input class='form-control {% if errors.get('bankReceipt') %}is-invalid{% endif %}' type=file name=bankReceipt>
  {% if errors.get('bankReceipt') %}<div class='invalid-feedback'>{{ errors.bankReceipt }}</div>{% endif %}
{% endif %}
{% if errors.get('paymentMethod') %}<div class='alert alert-danger mt-2'>{{ errors.paymentMethod }}</div>{% endif %}
<button class='btn btn-success mt-3'>{{ pay_label }}</button>
</form>
</div>
<div class='col-md-5'>
<div class='card p-3'>
  <h5>Order summary</h5>
  <p class='mb-1'><b>{{ route['from'] }} &rarr; {{ route['to'] }}</b></p>
  <p class='mb-1 text-muted'>{{ route.departureDate }} &middot; {{ route.departureTime }} - {{ route.arrivalTime }}</p>
  <p class='mb-1'>{{ bus.company }} &middot; {{ bus.type }}</p>
  <p class='mb-2'>Seats: {{ booking.selectedSeats|join(', ') }}</p>
  <ul class='list-unstyled small'>{% for p in booking.passengers %}<li>{{ p.seatNumber }}: {{ p.name }}</li>{% endfor %}</ul>
  <table class='table table-sm mb-0'>
    <tr><td>Base fare x {{ pricing.passengers }}</td><td class='text-end'>ETB {{ pricing.baseFare }}</td></tr>
    <tr><td>Subtotal</td><td class='text-end'>ETB {{ pricing.subtotal }}</td></tr>
    <tr><td>Taxes (15%)</td><td class='text-end'>ETB {{ pricing.tax }}</td></tr>
    <tr><td>Convenience fee</td><td class='text-end'>ETB {{ pricing.convenienceFee }}</td></tr>
    <tr class='fw-bold'><td>Total</td><td class='text-end'>ETB {{ pricing.total }}</td></tr>
  </table>
</div>
</div>
</div>
{% endblock %}""",

"confirmation.html": """{% extends 'base.html' %}{% block title %}Booking Confirmed{% endblock %}{% block content %}
<div class='card p-4'>
<div class='d-flex justify-content-between'>
<div>
  <h3 class='text-success'>{% if conf.requires_verification %}Booking received{% else %}Booking confirmed{% endif %}</h3>
  <p>Reference: <b>{{ conf.reference }}</b></p>
  {% if conf.requires_verification %}<div class='alert alert-warning'>Your bank transfer will be verified within 24 hours.</div>{% endif %}
  <p>{{ conf.trip_date }}</p>
  <p><b>{{ conf.route['from'] }}</b> {{ conf.departure_time }} ({{ conf.route.departureTerminal }})
     &rarr; <b>{{ conf.route['to'] }}</b> {{ conf.arrival_time }} ({{ conf.route.arrivalTerminal }})
     <span class='text-muted'>{{ conf.duration }}</span></p>
  <p>{{ conf.bus.company }} &middot; {{ conf.bus.type }}</p>
</div>
<img src='{{ qr_url }}' alt='Ticket QR code' width=180 height=180>
</div>
<h5>Passengers</h5>
<table class='table table-sm'><thead><tr><th>Name</th><th>Seat</th><th>Gender</th><th>Age</th></tr></thead><tbody>
{% for p in conf.passengers %}<tr><td>{{ p.name }}</td><td>{{ p.seat }}</td><td>{{ p.gender }}</td><td>{{ p.age }}</td></tr>{% endfor %}
</tbody></table>
<h5>Payment</h5>
<p>ETB {{ conf.pricing.total }} via {{ conf.payment_method_label }} <small class='text-muted'>{{ conf.payment_id }}</small></p>
<div class='d-flex gap-2'>
  <a class='btn btn-primary' href='{{ pdf_url }}'>Download ticket (PDF)</a>
  {% if actions %}
  <form method=post action='/confirmation/email'><button class='btn btn-outline-primary'>Email ticket</button></form>
  <form method=post action='/confirmation/sms'><button class='btn btn-outline-primary'>Send SMS</button></form>
  <form method=post action='/confirmation/cancel'><button class='btn btn-outline-danger' {% if cancellation_requested %}disabled{% endif %}>
    {% if cancellation_requested %}Cancellation Requested{% else %}Cancel booking{% endif %}</button></form>
  {% endif %}
</div>
</div>
{% endblock %}""",

"login.html": """{% extends 'base.html' %}{% block title %}Login{% endblock %}{% block content %}
<div class='row justify-content-center'><div class='col-md-4'>
<form method=post class='card p-4'>
<h4 class='mb-3'>Login</h4>
<input class='form-control mb-1 {% if errors.email %}is-invalid{% endif %}' name=email placeholder='Email or phone' value='{{ form.get("email", "") }}' required>
{% if errors.email %}<div class='invalid-feedback d-block'>{{ errors.email }}</div>{% endif %}
<input class='form-control mt-2 mb-1 {% if errors.password %}is-invalid{% endif %}' name=password type=password placeholder='Password' required>
{% if errors.password %}<div class='invalid-feedback d-block'>{{ errors.password }}</div>{% endif %}
<label class='form-check my-2'><input class='form-check-input' type=checkbox name=rememberMe value=1> Remember me</label>
<button class='btn btn-primary w-100'>Login</button>
<div class='text-center mt-3'><a href='/register'>Register</a> · <a href='/forgot-password'>Forgot?</a></div>
</form>
<div class='d-flex gap-2 mt-3'>
  <form method=post action='/auth/social/google' class='w-50'><button class='btn btn-outline-danger w-100'>Google</button></form>
  <form method=post action='/auth/social/facebook' class='w-50'><button class='btn btn-outline-primary w-100'>Facebook</button></form>
</div>
</div></div>{% endblock %}""",

"register.html": """{% extends 'base.html' %}{% block title %}Register{% endblock %}{% block content %}
<div class='row justify-content-center'><div class='col-md-5'>
<form method=post class='card p-4'>
<h4>Create Account</h4>
{% for name, label, type in [('firstName','First name','text'),('lastName','Last name','text'),('email','Email','email'),('phoneNumber','Phone number','tel'),('password','Password','password'),('confirmPassword','Confirm password','password')] %}
<input class='form-control mt-2 {% if errors.get(name) %}is-invalid{% endif %}' name='{{name}}' type='{{type}}' placeholder='{{label}}' value='{{ form.get(name, "") if type != "password" else "" }}'>
{% if errors.get(name) %}<div class='invalid-feedback'>{{ errors[name] }}</div>{% endif %}
{% endfor %}
<small class='text-muted'>At least 8 characters with upper case, lower case, a number and a special character.</small>
<label class='form-check mt-2'><input class='form-check-input' type=checkbox name=terms value=1> I agree to the terms and conditions</label>
{% if errors.get('terms') %}<div class='text-danger small'>{{ errors.terms }}</div>{% endif %}
<button class='btn btn-success w-100 mt-3'>Create</button>
</form></div></div>{% endblock %}""",

"forgot.html": """{% extends 'base.html' %}{% block title %}Forgot Password{% endblock %}{% block content %}
<form method=post class='card p-4 mx-auto' style='max-width:420px'>
<p>Enter your account email and we'll send reset instructions.</p>
<input class='form-control mb-1 {% if errors.email %}is-invalid{% endif %}' type=email name=email placeholder='Email'>
{% if errors.email %}<div class='invalid-feedback d-block'>{{ errors.email }}</div>{% endif %}
<button class='btn btn-primary w-100 mt-2'>Send</button>
</form>{% endblock %}""",

"profile.html": """{% extends 'base.html' %}{% block title %}My Profile{% endblock %}{% block content %}
<div class='d-flex align-items-center mb-3'>
  <img src='{{ current_user.avatar }}' class='rounded-circle me-3' width=64 height=64 alt=''>
  <div><h3 class='mb-0'>{{ current_user.name }}</h3><small class='text-muted'>{{ current_user.email }} · {{ current_user.phone or '' }}</small></div>
</div>
<ul class='nav nav-tabs mb-3'>
{% for t in ['overview','bookings','wallet','settings'] %}<li class='nav-item'><a class='nav-link {% if t == tab %}active{% endif %}' href='/profile?tab={{t}}'>{{ t|capitalize }}</a></li>{% endfor %}
</ul>
{% if tab == 'bookings' %}
<form class='row g-2 mb-3'>
  <input type=hidden name=tab value=bookings>
  <div class='col-auto'><select class='form-select' name=status><option value=''>All statuses</option>
  {% for s in ['pending','confirmed','completed','cancelled'] %}<option {% if s == status %}selected{% endif %}>{{ s }}</option>{% endfor %}</select></div>
  <div class='col-auto'><select class='form-select' name=range><option value=''>Any date</option>
  {% for r in ['today','week','month'] %}<option {% if r == date_range %}selected{% endif %}>{{ r }}</option>{% endfor %}</select></div>
  <div class='col-auto'><button class='btn btn-secondary'>Filter</button></div>
</form>
<table class='table table-striped'><thead><tr><th>Reference</th><th>Route</th><th>Date</th><th>Seats</th><th>Amount</th><th>Status</th><th></th></tr></thead><tbody>
{% for b in bookings %}
<tr><td><a href='/booking/{{ b.reference }}'>{{ b.reference }}</a></td><td>{{ b.from_city }} &rarr; {{ b.to_city }}</td><td>{{ b.travel_date }} {{ b.departure_time }}</td>
<td>{{ b.seats }}</td><td>ETB {{ b.amount }}</td><td>{{ b.status }}</td>
<td>{% if b.status != 'cancelled' %}<form method=post action='/profile/bookings/{{ b.reference }}/cancel'><button class='btn btn-sm btn-outline-danger'>Cancel</button></form>{% endif %}</td></tr>
{% else %}<tr><td colspan=7 class='text-muted'>No bookings found</td></tr>{% endfor %}
</tbody></table>
<p class='text-muted small'>Cancellations close {{ cutoff }} minutes before departure. Refunds go to your wallet.</p>
{% elif tab == 'wallet' %}
<div class='row mb-3'>
  <div class='col'><div class='card p-3'>Balance<h4>ETB {{ '{:,.2f}'.format(stats.wallet_balance) }}</h4></div></div>
  <div class='col'><div class='card p-3'>Total deposits<h4>ETB {{ '{:,.2f}'.format(stats.total_deposits) }}</h4></div></div>
  <div class='col'><div class='card p-3'>Total withdrawals<h4>ETB {{ '{:,.2f}'.format(stats.total_withdrawals) }}</h4></div></div>
</div>
<form method=post action='/profile/funds' class='row g-2 mb-3'>
  <div class='col-auto'><input class='form-control' name=amount type=number step='0.01' placeholder='Amount'></div>
  <div class='col-auto'><select class='form-select' name=paymentMethod>{% for m in ['telebirr','cbebirr','card'] %}<option value='{{m}}'>{{ method_labels[m] }}</option>{% endfor %}</select></div>
  <div class='col-auto'><button class='btn btn-success'>Add funds</button></div>
</form>
<table class='table table-sm'><thead><tr><th>Date</th><th>Type</th><th>Description</th><th class='text-end'>Amount</th></tr></thead><tbody>
{% for t in transactions %}<tr><td>{{ t.date.date() }}</td><td>{{ t.type }}</td><td>{{ t.description }}</td><td class='text-end'>ETB {{ t.amount }}</td></tr>
{% else %}<tr><td colspan=4 class='text-muted'>No transactions yet</td></tr>{% endfor %}
</tbody></table>
{% elif tab == 'settings' %}
<div class='row'>
<form method=post action='/profile/edit' class='col-md-6 card p-3'>
  <h5>Edit profile</h5>
  <input class='form-control mb-2' name=firstName value='{{ current_user.first_name }}'>
  <input class='form-control mb-2' name=lastName value='{{ current_user.last_name }}'>
  <input class='form-control mb-2' name=email type=email value='{{ current_user.email }}'>
  <input class='form-control mb-2' name=phone value='{{ current_user.phone or "" }}'>
  <button class='btn btn-primary'>Save</button>
</form>
<form method=post action='/profile/password' class='col-md-6 card p-3'>
  <h5>Change password</h5>
  <input class='form-control mb-2' type=password name=currentPassword placeholder='Current password'>
  <input class='form-control mb-2' type=password name=newPassword placeholder='New password'>
  <input class='form-control mb-2' type=password name=confirmPassword placeholder='Confirm new password'>
  <button class='btn btn-primary'>Change</button>
</form>
</div>
{% else %}
<div class='row mb-3'>
  <div class='col'><div class='card p-3'>Total bookings<h4>{{ stats.total_bookings }}</h4></div></div>
  <div class='col'><div class='card p-3'>Total spent<h4>ETB {{ '{:,}'.format(stats.total_spent) }}</h4></div></div>
  <div class='col'><div class='card p-3'>Wallet balance<h4>ETB {{ '{:,.2f}'.format(stats.wallet_balance) }}</h4></div></div>
</div>
<h5>Recent activity</h5>
<ul class='list-group'>
{% for b in recent %}<li class='list-group-item'>{{ b.from_city }} &rarr; {{ b.to_city }} · {{ b.travel_date }} · <span class='badge bg-info text-dark'>{{ b.status }}</span></li>
{% else %}<li class='list-group-item text-muted'>No bookings yet. <a href='/'>Find a bus</a></li>{% endfor %}
</ul>
{% endif %}
{% endblock %}""",

"contact.html": """{% extends 'base.html' %}{% block title %}Contact{% endblock %}{% block content %}
<form method=post class='card p-4 mx-auto' style='max-width:520px'>
<h4>Contact us</h4>
<input class='form-control mb-2' name=name placeholder='Name' value='{{ form.get("name", "") }}'>
<input class='form-control mb-2' name=email type=email placeholder='Email' value='{{ form.get("email", "") }}'>
<input class='form-control mb-2' name=phone placeholder='Phone' value='{{ form.get("phone", "") }}'>
<textarea class='form-control mb-3' name=message rows=4 placeholder='Message'>{{ form.get("message", "") }}</textarea>
<button class='btn btn-primary'>Send</button>
<p class='text-muted small mt-3 mb-0'>support@selambus.com</p>
</form>{% endblock %}""",

"admin/index.html": """{% extends 'base.html' %}{% block title %}Admin{% endblock %}{% block content %}
<h3>Admin Dashboard</h3>
{% include '_admin_nav.html' %}
<div class='row mb-3'>
  <div class='col'><div class='card p-3'>Revenue<h4>ETB {{ '{:,}'.format(stats.total_revenue) }}</h4></div></div>
  <div class='col'><div class='card p-3'>Bookings<h4>{{ stats.total_bookings }}</h4></div></div>
  <div class='col'><div class='card p-3'>Active users<h4>{{ stats.active_users }}</h4></div></div>
  <div class='col'><div class='card p-3'>Active buses<h4>{{ stats.active_buses }}</h4></div></div>
  <div class='col'><div class='card p-3'>Pending<h4>{{ stats.pending_bookings }}</h4></div></div>
</div>
<p class='text-muted'>Registered accounts: {{ registered_users }} · Site bookings: {{ booking_count }}</p>
<canvas id=revenueChart height=90></canvas>
<div class='row mt-3'>
<div class='col-md-6'><h5>Recent activity</h5><ul class='list-group'>
{% for b in recent %}<li class='list-group-item'>{{ b.id }} · {{ b.customer.name }} · {{ b.route['from'] }} &rarr; {{ b.route['to'] }} · {{ b.status }}</li>{% endfor %}
</ul></div>
<div class='col-md-6'><h5>Top routes</h5><table class='table table-sm'><thead><tr><th>Route</th><th>Bookings</th><th>Revenue</th></tr></thead><tbody>
{% for r in top_routes %}<tr><td>{{ r.route }}</td><td>{{ r.bookings }}</td><td>ETB {{ '{:,}'.format(r.revenue) }}</td></tr>{% endfor %}
</tbody></table></div>
</div>
{% endblock %}
{% block scripts %}
<script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
<script>
fetch('/admin/revenue.json').then(r => r.json()).then(d => {
  new Chart(document.getElementById('revenueChart'), {
    type: 'line',
    data: {labels: d.labels, datasets: [{label: 'Revenue (ETB)', data: d.data, borderColor: '#3b82f6', tension: 0.3}]},
  });
});
</script>
{% endblock %}""",

"admin/bookings.html": """{% extends 'base.html' %}{% block title %}All Bookings{% endblock %}{% block content %}
<h3>Bookings <a class='btn btn-sm btn-outline-info' href='/admin/export/bookings.csv'>Export CSV</a></h3>
{% include '_admin_nav.html' %}
<form class='row g-2 mb-3'>
  <div class='col-auto'><select class='form-select' name=status><option value=''>All statuses</option>
  {% for s in ['pending','confirmed','cancelled','completed'] %}<option {% if request.args.get('status') == s %}selected{% endif %}>{{ s }}</option>{% endfor %}</select></div>
  <div class='col-auto'><select class='form-select' name=range><option value=''>Any time</option>
  {% for r in ['today','week','month'] %}<option {% if request.args.get('range') == r %}selected{% endif %}>{{ r }}</option>{% endfor %}</select></div>
  <div class='col-auto'><input class='form-control' type=date name=date value='{{ request.args.get("date", "") }}'></div>
  <div class='col-auto'><button class='btn btn-secondary'>Filter</button></div>
</form>
<table class='table table-striped'><thead><tr><th>ID</th><th>Customer</th><th>Route</th><th>Date</th><th>Seats</th><th>Amount</th><th>Status</th></tr></thead><tbody>
{% for b in page.items %}
<tr><td>{{ b.id }}</td><td>{{ b.customer.name }}<br><small>{{ b.customer.email }}</small></td><td>{{ b.route['from'] }} &rarr; {{ b.route['to'] }}</td>
<td>{{ b.date }} {{ b.time }}</td><td>{{ b.seats }}</td><td>ETB {{ b.amount }}</td><td>{{ b.status }}</td></tr>
{% endfor %}
</tbody></table>
{% include '_pager.html' %}
{% endblock %}""",

"admin/buses.html": """{% extends 'base.html' %}{% block title %}Admin Buses{% endblock %}{% block content %}
<h3>Buses <a class='btn btn-sm btn-outline-info' href='/admin/export/buses.csv'>Export CSV</a></h3>
{% include '_admin_nav.html' %}
<form class='row g-2 mb-3'>
  <div class='col-auto'><input class='form-control' name=company placeholder='Company' value='{{ request.args.get("company", "") }}'></div>
  <div class='col-auto'><select class='form-select' name=type><option value=''>All types</option>
  {% for t in ['economy','business','luxury'] %}<option value='{{t}}' {% if request.args.get('type') == t %}selected{% endif %}>{{ t|capitalize }}</option>{% endfor %}</select></div>
  <div class='col-auto'><button class='btn btn-secondary'>Filter</button></div>
</form>
<div class='row'>
{% for b in page.items %}
<div class='col-md-3 mb-3'><div class='card p-3 h-100'>
  <b>{{ b.id }}</b> <span class='badge {% if b.status == "active" %}bg-success{% else %}bg-warning text-dark{% endif %}'>{{ b.status }}</span>
  <div>{{ b.company }} · {{ b.type }}</div>
  <small class='text-muted'>{{ b.model }} · {{ b.capacity }} seats</small>
  <small>{{ b.route['from'] }} &rarr; {{ b.route['to'] }} at {{ b.departureTime }}</small>
  <small>ETB {{ b.price }} · {{ b.amenities|join(', ') }}</small>
</div></div>
{% endfor %}
</div>
{% include '_pager.html' %}
{% endblock %}""",

"admin/users.html": """{% extends 'base.html' %}{% block title %}Users{% endblock %}{% block content %}
<h3>Users <a class='btn btn-sm btn-outline-info' href='/admin/export/users.csv'>Export CSV</a></h3>
{% include '_admin_nav.html' %}
<form class='row g-2 mb-3'>
  <div class='col-auto'><select class='form-select' name=type><option value=''>All types</option>
  {% for t in ['customer','admin'] %}<option {% if request.args.get('type') == t %}selected{% endif %}>{{ t }}</option>{% endfor %}</select></div>
  <div class='col-auto'><select class='form-select' name=status><option value=''>All statuses</option>
  {% for s in ['active','inactive'] %}<option {% if request.args.get('status') == s %}selected{% endif %}>{{ s }}</option>{% endfor %}</select></div>
  <div class='col-auto'><button class='btn btn-secondary'>Filter</button></div>
</form>
<table class='table table-striped'><thead><tr><th>ID</th><th>Name</th><th>Email</th><th>Phone</th><th>Type</th><th>Status</th><th>Joined</th><th>Bookings</th></tr></thead><tbody>
{% for u in page.items %}<tr><td>{{ u.id }}</td><td>{{ u.name }}</td><td>{{ u.email }}</td><td>{{ u.phone }}</td><td>{{ u.type }}</td><td>{{ u.status }}</td><td>{{ u.joinDate }}</td><td>{{ u.bookings }}</td></tr>{% endfor %}
</tbody></table>
{% include '_pager.html' %}
{% endblock %}""",

"admin/search.html": """{% extends 'base.html' %}{% block title %}Admin Search{% endblock %}{% block content %}
<h3>Search results for "{{ q }}"</h3>
{% include '_admin_nav.html' %}
{% for kind in ['bookings','buses','users'] %}
<h5>{{ kind|capitalize }} ({{ results[kind]|length }})</h5>
<ul class='list-group mb-3'>
{% for r in results[kind] %}<li class='list-group-item'>{{ r.id }} · {{ r.customer.name if kind == 'bookings' else (r.company if kind == 'buses' else r.name) }}</li>
{% else %}<li class='list-group-item text-muted'>No matches</li>{% endfor %}
</ul>
{% endfor %}
{% endblock %}""",

"admin/settings.html": """{% extends 'base.html' %}{% block title %}Settings{% endblock %}{% block content %}
<h3>Settings</h3>
{% include '_admin_nav.html' %}
<form method=post class='card p-4' style='max-width:420px'>
  <label>Cancellation cutoff (minutes)</label>
  <input class='form-control mb-3' type=number name=cutoff value='{{ cutoff }}' min=0>
  <button class='btn btn-primary'>Save</button>
</form>
{% endblock %}""",

"errors/403.html": """{% extends 'base.html' %}{% block title %}Forbidden{% endblock %}{% block content %}<h3>403 - Forbidden</h3><p>You do not have permission to access this page.</p>{% endblock %}""",
"errors/404.html": """{% extends 'base.html' %}{% block title %}Not Found{% endblock %}{% block content %}<h3>404 - Not Found</h3><p>The page you requested does not exist.</p>{% endblock %}""",
}

TEMPLATES = dict(TPLS, **{"base.html": BASE})
