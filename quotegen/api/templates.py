"""
Quotation form page — plain HTML/JS served as-is (no template rendering).
Totals preview comes from POST /api/calculate so the numbers on screen are
formatted by the same code that prints the PDF.
"""

BASE_CSS = """
:root{--bg:#f4f4f8;--sf:#fff;--bd:#d0d3dc;--tx:#2c3e50;--tx2:#666;--ac:#a94442;--gn:#27ae60;--rd:#e74c3c;--r:8px}
*{margin:0;padding:0;box-sizing:border-box}
body{font-family:Helvetica,Arial,sans-serif;background:var(--bg);color:var(--tx);min-height:100vh}
.hdr{background:var(--sf);border-bottom:2px solid var(--bd);padding:16px 28px;display:flex;align-items:center;gap:14px}
.logo{width:44px;height:44px;border-radius:50%;background:linear-gradient(90deg,var(--ac) 50%,#5a5a5a 50%);color:#fff;font-weight:700;font-size:20px;display:flex;align-items:center;justify-content:center}
.hdr h1{font-size:18px}.hdr p{font-size:12px;color:var(--tx2);font-style:italic}
.ctr{max-width:1000px;margin:0 auto;padding:20px 28px}
.card{background:var(--sf);border:1px solid var(--bd);border-radius:var(--r);padding:20px;margin-bottom:16px}
.card-t{font-size:12px;font-weight:700;text-transform:uppercase;letter-spacing:1px;margin-bottom:12px}
.grid{display:grid;grid-template-columns:repeat(4,1fr);gap:12px}
label{font-size:11px;color:var(--tx2);display:block;margin-bottom:4px}
input{width:100%;padding:7px 9px;border:1px solid var(--bd);border-radius:6px;font-size:13px}
table{width:100%;border-collapse:collapse}th{background:var(--bg);font-size:11px;text-align:left;padding:8px}
td{padding:6px 4px}td.num{text-align:right;font-family:monospace}
.btn{padding:9px 18px;border-radius:6px;border:1px solid var(--bd);background:var(--sf);cursor:pointer;font-weight:600}
.btn-p{background:var(--tx);color:#fff;border-color:var(--tx)}
.sum{margin-left:auto;width:320px}.sum div{display:flex;justify-content:space-between;padding:4px 0;font-size:13px}
.sum .gt{font-weight:700;font-size:15px;border-top:1px solid var(--bd);margin-top:6px;padding-top:8px}
#note{position:fixed;top:20px;right:20px;padding:14px 22px;border-radius:8px;color:#fff;font-weight:600;display:none}
"""

QUOTE_FORM_HTML = """<!doctype html>
<html lang="en"><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>Elcorp Namibia — Quotation Generator</title>
<style>""" + BASE_CSS + """</style></head>
<body>
<div class="hdr"><div class="logo">E</div>
 <div><h1>ELCORP NAMIBIA</h1><p>Professional Business Solutions</p></div></div>
<div class="ctr">
 <div class="card"><div class="card-t">Client Information</div>
  <div class="grid">
   <div><label>Client name</label><input id="clientName"></div>
   <div><label>Email</label><input id="clientEmail" type="email"></div>
   <div><label>Phone</label><input id="clientPhone"></div>
   <div><label>Quotation date</label><input id="quotationDate" type="date"></div>
  </div></div>
 <div class="card"><div class="card-t">Products / Services</div>
  <table><thead><tr><th>Name</th><th>Description</th><th>Qty</th><th>Unit price</th><th>Total</th><th></th></tr></thead>
  <tbody id="items"></tbody></table>
  <p style="margin-top:10px"><button class="btn" onclick="addItem()">+ Add item</button></p></div>
 <div class="card"><div class="card-t">Summary</div>
  <div class="grid" style="grid-template-columns:1fr 1fr 2fr">
   <div><label>Discount %</label><input id="discountPercent" type="number" value="0" min="0" max="100"></div>
   <div><label>Tax %</label><input id="taxPercent" type="number" value="15" min="0" max="100"></div>
   <div class="sum" id="summary"></div>
  </div></div>
 <p style="display:flex;gap:10px;justify-content:flex-end">
  <button class="btn" onclick="resetForm()">Reset</button>
  <button class="btn" onclick="saveQuotation()">Save</button>
  <button class="btn btn-p" onclick="generatePDF()">Generate PDF</button></p>
</div>
<div id="note"></div>
<script>
const $ = id => document.getElementById(id);
function addItem(){
  const tr = document.createElement('tr');
  tr.innerHTML = '<td><input class="i-name"></td><td><input class="i-desc"></td>' +
    '<td><input class="i-qty" type="number" min="0" value="1"></td>' +
    '<td><input class="i-price" type="number" min="0" step="0.01"></td>' +
    '<td class="num i-total">N$0.00</td><td><button class="btn" onclick="this.closest(\\'tr\\').remove();refresh()">&times;</button></td>';
  tr.querySelectorAll('input').forEach(i => i.addEventListener('input', refresh));
  $('items').appendChild(tr);
}
function rows(){ return [...document.querySelectorAll('#items tr')]; }
function getItems(){
  return rows().map(r => ({
    name: r.querySelector('.i-name').value, description: r.querySelector('.i-desc').value,
    quantity: r.querySelector('.i-qty').value, unitPrice: r.querySelector('.i-price').value,
  })).filter(it => it.name && parseFloat(it.quantity) && parseFloat(it.unitPrice));
}
function data(){
  return {clientName: $('clientName').value, clientEmail: $('clientEmail').value,
    clientPhone: $('clientPhone').value, quotationDate: $('quotationDate').value,
    items: getItems(), discountPercent: $('discountPercent').value, taxPercent: $('taxPercent').value};
}
let pending;
function refresh(){ clearTimeout(pending); pending = setTimeout(preview, 150); }
async function preview(){
  const all = rows().map(r => ({quantity: r.querySelector('.i-qty').value,
                                unitPrice: r.querySelector('.i-price').value}));
  const body = Object.assign(data(), {items: all});
  const res = await fetch('/api/calculate', {method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify(body)});
  if (!res.ok) return;
  const out = await res.json();
  $('summary').innerHTML = out.formatted.rows.map(r =>
    '<div class="' + (r.emphasized ? 'gt' : '') + '"><span>' + r.label + '</span><span>' + r.value + '</span></div>').join('');
  rows().forEach((r, i) => { if (out.lines[i]) r.querySelector('.i-total').textContent = out.lines[i].formatted; });
}
function note(msg, ok){
  const n = $('note'); n.textContent = (ok ? '\\u2713 ' : '\\u2715 ') + msg;
  n.style.background = ok ? 'var(--gn)' : 'var(--rd)'; n.style.display = 'block';
  setTimeout(() => n.style.display = 'none', 4000);
}
function valid(){
  const d = data();
  if (!d.clientName.trim()) { note('Please enter client name'); return false; }
  if (!/^[^\\s@]+@[^\\s@]+\\.[^\\s@]+$/.test(d.clientEmail.trim())) { note('Please enter a valid email address'); return false; }
  if (!d.clientPhone.trim()) { note('Please enter client phone number'); return false; }
  if (!d.items.length) { note('Please add at least one product/service'); return false; }
  return true;
}
async function generatePDF(){
  if (!valid()) return;
  const res = await fetch('/api/generate-pdf', {method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify(data())});
  if (!res.ok) { note('Failed to generate PDF. Please try again.'); return; }
  const url = URL.createObjectURL(await res.blob());
  const a = document.createElement('a'); a.href = url; a.download = 'quotation-' + Date.now() + '.pdf';
  document.body.appendChild(a); a.click(); URL.revokeObjectURL(url); a.remove();
  note('Quotation PDF generated successfully!', true);
}
async function saveQuotation(){
  if (!valid()) return;
  const res = await fetch('/api/save-quotation', {method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify(data())});
  if (!res.ok) { note('Failed to save quotation. Please try again.'); return; }
  const out = await res.json();
  note('Quotation saved successfully! ID: ' + out.quotation.id, true);
}
function resetForm(){
  if (!confirm('Are you sure you want to reset the form? This action cannot be undone.')) return;
  ['clientName','clientEmail','clientPhone'].forEach(id => $(id).value = '');
  $('quotationDate').valueAsDate = new Date();
  $('discountPercent').value = '0'; $('taxPercent').value = '15';
  $('items').innerHTML = ''; addItem(); refresh();
}
['discountPercent','taxPercent'].forEach(id => $(id).addEventListener('input', refresh));
$('quotationDate').valueAsDate = new Date();
addItem(); refresh();
</script>
</body></html>
"""
