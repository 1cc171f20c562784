from django.http import HttpResponse


def api_playground(request):
    html = '''<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>Hostel Fees Playground</title>
    <style>body{font-family:system-ui,Arial;margin:20px} textarea{width:100%;height:90px}</style>
  </head>
  <body>
    <h2>Hostel Fee Engine: Playground</h2>

    <h3>GET /api/v1/payments/status</h3>
    <p>matricNumber: <input id="status_matric" /> or reference: <input id="status_ref" /></p>
    <button onclick="checkStatus()">Check Status</button>

    <h3>POST /api/v1/payments/initiate</h3>
    <textarea id="initiate_body">{"matricNumber":"2020/1234","firstName":"Ada","lastName":"Obi","email":"ada@example.com","amount":109500,"channel":"reference"}</textarea>
    <button onclick="post('/api/v1/payments/initiate', 'initiate_body')">Initiate Payment</button>

    <h3>POST /api/v1/payments</h3>
    <textarea id="record_body">{"matricNumber":"2020/1234","transactionId":"TXN1","amount":109500,"status":"completed"}</textarea>
    <button onclick="post('/api/v1/payments', 'record_body')">Record Payment</button>

    <h3>POST /api/v1/registrations</h3>
    <textarea id="register_body">{"matricNumber":"2020/1234","firstName":"Ada","lastName":"Obi","email":"ada@example.com","level":"200"}</textarea>
    <button onclick="post('/api/v1/registrations', 'register_body')">Complete Registration</button>

    <h3>Response</h3>
    <pre id="out"></pre>

    <script>
    async function show(resp){
      const text = await resp.text();
      document.getElementById('out').textContent = 'Status: '+resp.status+'\\n'+text;
    }
    async function checkStatus(){
      const params = new URLSearchParams();
      const m = document.getElementById('status_matric').value;
      const r = document.getElementById('status_ref').value;
      if(m) params.set('matricNumber', m);
      if(r) params.set('reference', r);
      try{ await show(await fetch('/api/v1/payments/status?'+params.toString())); }
      catch(e){ document.getElementById('out').textContent = 'Fetch error: '+e }
    }
    async function post(path, bodyId){
      const out = document.getElementById('out');
      out.textContent = '...loading';
      let body = document.getElementById(bodyId).value;
      try{ body = JSON.parse(body); }catch(e){ out.textContent = 'Invalid JSON body'; return }
      try{
        await show(await fetch(path, {method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify(body)}));
      }catch(e){ out.textContent = 'Fetch error: '+e }
    }
    </script>
  </body>
</html>
'''
    return HttpResponse(html)
